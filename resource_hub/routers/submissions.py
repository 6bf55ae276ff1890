from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    UploadFile,
)
from sqlalchemy.orm import Session
from typing import List, Optional
from ..database import get_db
from ..dependencies import get_current_user, get_intake_service, get_notifier
from ..models.models import Category, Submission, SubmissionStatus, User
from ..schemas.submission import IntakeResponse, SubmissionResponse
from ..services.intake import IntakeFields, IntakeService
from ..services.notifications import Notifier, UploadNotice
from ..utils.file_handler import read_upload_file

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.post("", response_model=IntakeResponse, status_code=201)
def create_submission(
    background_tasks: BackgroundTasks,
    title: str = Form(...),
    subject: str = Form(...),
    department: str = Form(...),
    category: Category = Form(...),
    description: Optional[str] = Form(None),
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    intake: IntakeService = Depends(get_intake_service),
    notifier: Notifier = Depends(get_notifier),
):
    """Upload a resource; it is either published or queued for review"""
    data = read_upload_file(file)

    submission = intake.submit(
        db,
        current_user,
        IntakeFields(
            title=title,
            subject=subject,
            department=department,
            category=category.value,
            description=description,
        ),
        data,
        filename=file.filename,
        content_type=file.content_type,
    )

    if submission.status == SubmissionStatus.PENDING_REVIEW.value:
        background_tasks.add_task(
            notifier.send_upload_notification,
            UploadNotice(
                file_name=submission.file_name,
                uploaded_by=submission.uploaded_by,
                subject=submission.subject,
                department=submission.department,
                category=submission.category,
                file_size=submission.file_size,
                submission_id=submission.id,
            ),
        )

    return submission


@router.get("/mine", response_model=List[SubmissionResponse])
def get_my_submissions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's own submissions with their current status"""
    return (
        db.query(Submission)
        .filter(Submission.submitter_id == current_user.user_id)
        .order_by(Submission.created_at.desc())
        .all()
    )
