from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from ..database import get_db
from ..dependencies import get_storage
from ..exceptions import SubmissionNotFound
from ..models.models import Category, Submission, SubmissionStatus
from ..schemas.submission import ResourceResponse
from ..services import store

router = APIRouter(tags=["Resources"])


def _get_published(db: Session, resource_id: str) -> Submission:
    try:
        submission = store.get(db, resource_id)
    except SubmissionNotFound:
        submission = None
    if (
        submission is None
        or submission.status != SubmissionStatus.PUBLISHED.value
    ):
        raise HTTPException(status_code=404, detail="Resource not found")
    return submission


@router.get("/resources", response_model=List[ResourceResponse])
def list_resources(
    q: Optional[str] = None,
    category: Optional[Category] = None,
    department: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Browse published resources, optionally searching and filtering"""
    return store.search_published(
        db,
        q=q,
        category=category.value if category else None,
        department=department,
    )


@router.get("/resources/{resource_id}", response_model=ResourceResponse)
def get_resource(resource_id: str, db: Session = Depends(get_db)):
    return _get_published(db, resource_id)


@router.get("/resources/{resource_id}/download")
def download_resource(resource_id: str, db: Session = Depends(get_db)):
    """Count the download and redirect to the public file"""
    submission = _get_published(db, resource_id)
    store.increment_downloads(db, submission)
    return RedirectResponse(url=submission.file_url, status_code=307)


@router.get("/files/{key:path}")
def serve_file(key: str, storage=Depends(get_storage)):
    """Serve objects held by the local storage backend"""
    try:
        data = storage.get(key)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    return Response(content=data, media_type="application/octet-stream")
