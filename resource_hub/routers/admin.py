from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import List
from ..database import get_db
from ..dependencies import get_storage, require_admin, require_moderator
from ..exceptions import InvalidStateTransition, SubmissionNotFound
from ..models.models import Submission, SubmissionStatus, User
from ..schemas.admin import AdminResourceResponse, AdminStats, RoleGrant
from ..schemas.user import UserResponse
from ..services import store

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=AdminStats)
def get_stats(
    reviewer: User = Depends(require_moderator),
    db: Session = Depends(get_db),
):
    """Dashboard counters over published and pending submissions"""
    published = db.query(Submission).filter(
        Submission.status == SubmissionStatus.PUBLISHED.value
    )
    week_ago = datetime.utcnow() - timedelta(days=7)

    return AdminStats(
        total_resources=published.count(),
        total_downloads=published.with_entities(
            func.coalesce(func.sum(Submission.download_count), 0)
        ).scalar(),
        total_uploaders=published.with_entities(
            func.count(func.distinct(Submission.submitter_id))
        ).scalar(),
        recent_uploads=published.filter(
            Submission.created_at > week_ago
        ).count(),
        pending_review=db.query(Submission)
        .filter(Submission.status == SubmissionStatus.PENDING_REVIEW.value)
        .count(),
    )


@router.get("/resources", response_model=List[AdminResourceResponse])
def list_resources(
    reviewer: User = Depends(require_moderator),
    db: Session = Depends(get_db),
):
    """Published resources with uploader details, newest first"""
    return [
        AdminResourceResponse(
            id=submission.id,
            title=submission.title,
            subject=submission.subject,
            description=submission.description,
            department=submission.department,
            category=submission.category,
            file_name=submission.file_name,
            file_size=submission.file_size,
            file_url=submission.file_url,
            download_count=submission.download_count,
            uploaded_by=submission.uploaded_by,
            created_at=submission.created_at,
            uploader_email=uploader.email,
            uploader_display_name=uploader.display_name,
            uploader_department=uploader.department,
        )
        for submission, uploader in store.list_published_with_uploaders(db)
    ]


@router.delete("/resources/{resource_id}", status_code=204)
def delete_resource(
    resource_id: str,
    reviewer: User = Depends(require_moderator),
    db: Session = Depends(get_db),
    storage=Depends(get_storage),
):
    """Remove a published resource and its stored file"""
    try:
        store.delete_published(db, resource_id, storage)
    except SubmissionNotFound:
        raise HTTPException(status_code=404, detail="Resource not found")
    except InvalidStateTransition:
        raise HTTPException(
            status_code=409, detail="Only published resources can be deleted"
        )
    return Response(status_code=204)


@router.post("/roles", response_model=UserResponse)
def grant_role(
    grant: RoleGrant,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Assign a role to an existing user by email"""
    user = db.query(User).filter(User.email == grant.email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    user.role = grant.role
    db.commit()
    db.refresh(user)
    return user
