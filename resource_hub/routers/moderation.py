from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session
from typing import List
from urllib.parse import quote
from ..database import get_db
from ..dependencies import get_moderation_service, require_moderator
from ..exceptions import (
    InvalidStateTransition,
    StorageWriteFailure,
    SubmissionNotFound,
)
from ..models.models import User
from ..schemas.submission import ReviewDecision, SubmissionResponse
from ..services.moderation_service import ModerationService

router = APIRouter(prefix="/moderation", tags=["Moderation"])


@router.get("/pending", response_model=List[SubmissionResponse])
def get_pending_submissions(
    reviewer: User = Depends(require_moderator),
    db: Session = Depends(get_db),
    moderation: ModerationService = Depends(get_moderation_service),
):
    """Get submissions waiting for review, newest first"""
    return moderation.list_pending(db)


@router.get("/pending/{submission_id}/file")
def get_pending_file(
    submission_id: str,
    reviewer: User = Depends(require_moderator),
    db: Session = Depends(get_db),
    moderation: ModerationService = Depends(get_moderation_service),
):
    """Download the staged bytes of a pending submission for inspection"""
    try:
        submission = moderation.staged_file(db, submission_id)
    except SubmissionNotFound:
        raise HTTPException(
            status_code=404, detail="Pending submission not found"
        )
    return Response(
        content=submission.staged_payload,
        media_type=submission.content_type or "application/octet-stream",
        headers={
            "Content-Disposition": (
                f"attachment; filename*=UTF-8''{quote(submission.file_name)}"
            )
        },
    )


@router.post("/{submission_id}/decision", response_model=SubmissionResponse)
def decide_submission(
    submission_id: str,
    review: ReviewDecision,
    reviewer: User = Depends(require_moderator),
    db: Session = Depends(get_db),
    moderation: ModerationService = Depends(get_moderation_service),
):
    """Approve or reject a pending submission (rejection is permanent)"""
    try:
        return moderation.decide(
            db, submission_id, review.decision, reviewer, note=review.note
        )
    except SubmissionNotFound:
        raise HTTPException(status_code=404, detail="Submission not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageWriteFailure as e:
        raise HTTPException(
            status_code=502, detail=f"Failed to publish file: {str(e)}"
        )
