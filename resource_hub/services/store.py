"""Submission store: durable records and guarded status transitions.

Every transition is a single UPDATE keyed by id *and* the status the caller
observed, so a submission that moved underneath us is reported as an
``InvalidStateTransition`` instead of being overwritten.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..exceptions import InvalidStateTransition, SubmissionNotFound
from ..models.models import Submission, SubmissionStatus, User, validate_transition
from .classifier import Verdict
from .storage import make_object_key

logger = logging.getLogger(__name__)


def create(
    db: Session,
    *,
    submitter,
    title: str,
    subject: str,
    department: str,
    category: str,
    file_name: str,
    payload: bytes,
    content_type: Optional[str] = None,
    description: Optional[str] = None,
) -> Submission:
    submission = Submission(
        title=title,
        subject=subject,
        description=description,
        department=department,
        category=category,
        submitter_id=submitter.user_id,
        uploaded_by=submitter.display_name or submitter.username,
        file_name=file_name,
        content_type=content_type,
        file_size=len(payload),
        staged_payload=payload,
        status=SubmissionStatus.INTAKE.value,
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    logger.info("Created submission %s (%s)", submission.id, file_name)
    return submission


def get(db: Session, submission_id: str) -> Submission:
    submission = (
        db.query(Submission).filter(Submission.id == submission_id).first()
    )
    if not submission:
        raise SubmissionNotFound(submission_id)
    return submission


def list_by_status(
    db: Session, status: SubmissionStatus, newest_first: bool = True
) -> List[Submission]:
    order = (
        Submission.created_at.desc()
        if newest_first
        else Submission.created_at.asc()
    )
    return (
        db.query(Submission)
        .filter(Submission.status == SubmissionStatus(status).value)
        .order_by(order)
        .all()
    )


def search_published(
    db: Session,
    q: Optional[str] = None,
    category: Optional[str] = None,
    department: Optional[str] = None,
) -> List[Submission]:
    query = db.query(Submission).filter(
        Submission.status == SubmissionStatus.PUBLISHED.value
    )
    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(
            or_(
                Submission.title.ilike(pattern),
                Submission.subject.ilike(pattern),
                Submission.department.ilike(pattern),
            )
        )
    if category:
        query = query.filter(Submission.category == category)
    if department:
        query = query.filter(Submission.department == department)
    return query.order_by(Submission.created_at.desc()).all()


def list_published_with_uploaders(db: Session) -> List[Tuple[Submission, User]]:
    """Published submissions paired with their submitter, newest first"""
    return (
        db.query(Submission, User)
        .join(User, Submission.submitter_id == User.user_id)
        .filter(Submission.status == SubmissionStatus.PUBLISHED.value)
        .order_by(Submission.created_at.desc())
        .all()
    )


def record_verdict(
    db: Session, submission: Submission, verdict: Optional[Verdict]
) -> Submission:
    """Store the classifier verdict. A recorded verdict is never replaced."""
    if verdict is None:
        return submission
    submission.ai_analysis = verdict.to_json()
    db.commit()
    db.refresh(submission)
    return submission


def _apply_transition(
    db: Session, submission: Submission, target: SubmissionStatus, **values
) -> Submission:
    current = submission.status
    validate_transition(submission.id, current, target)

    values["status"] = target.value
    updated = (
        db.query(Submission)
        .filter(Submission.id == submission.id, Submission.status == current)
        .update(values, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        db.refresh(submission)
        raise InvalidStateTransition(
            submission.id, submission.status, target.value
        )
    db.commit()
    db.refresh(submission)
    logger.info(
        "Submission %s: %s -> %s", submission.id, current, target.value
    )
    return submission


def hold_for_review(db: Session, submission_id: str) -> Submission:
    submission = get(db, submission_id)
    return _apply_transition(db, submission, SubmissionStatus.PENDING_REVIEW)


def _discard_object(storage, key: str):
    try:
        storage.delete(key)
    except Exception:
        logger.exception("Failed to clean up orphaned object %s", key)


def promote_to_published(
    db: Session, submission_id: str, storage, **review_values
) -> Submission:
    """Move the staged payload into durable storage and publish.

    The object is written first; only then is the row switched to
    ``published`` with the new reference and the inline payload cleared,
    in one guarded UPDATE. A failed write leaves the row untouched
    (StorageWriteFailure propagates); a failed UPDATE removes the object.
    """
    submission = get(db, submission_id)
    validate_transition(
        submission.id, submission.status, SubmissionStatus.PUBLISHED
    )

    key = make_object_key(submission.category, submission.file_name)
    storage.put(key, submission.staged_payload, submission.content_type)

    try:
        return _apply_transition(
            db,
            submission,
            SubmissionStatus.PUBLISHED,
            staged_payload=None,
            payload_key=key,
            file_url=storage.public_url(key),
            **review_values,
        )
    except Exception:
        db.rollback()
        _discard_object(storage, key)
        raise


def finalize_review(
    db: Session,
    submission_id: str,
    decision: str,
    storage,
    note: Optional[str] = None,
    reviewer=None,
) -> Submission:
    """Apply a reviewer's approve/reject decision to a held submission.

    Rejection purges the staged payload permanently.
    """
    if decision not in ("approve", "reject"):
        raise ValueError(f"Unknown review decision: {decision}")

    submission = get(db, submission_id)
    target = (
        SubmissionStatus.PUBLISHED
        if decision == "approve"
        else SubmissionStatus.REJECTED
    )
    if submission.status != SubmissionStatus.PENDING_REVIEW.value:
        raise InvalidStateTransition(
            submission.id, submission.status, target.value
        )

    review_values = {
        "review_note": note,
        "reviewed_by": reviewer.user_id if reviewer is not None else None,
        "reviewed_at": datetime.utcnow(),
    }
    if decision == "approve":
        return promote_to_published(
            db, submission.id, storage, **review_values
        )
    return _apply_transition(
        db,
        submission,
        SubmissionStatus.REJECTED,
        staged_payload=None,
        **review_values,
    )


def increment_downloads(db: Session, submission: Submission) -> Submission:
    db.query(Submission).filter(Submission.id == submission.id).update(
        {"download_count": Submission.download_count + 1},
        synchronize_session=False,
    )
    db.commit()
    db.refresh(submission)
    return submission


def delete_published(db: Session, submission_id: str, storage):
    submission = get(db, submission_id)
    if submission.status != SubmissionStatus.PUBLISHED.value:
        raise InvalidStateTransition(
            submission.id, submission.status, "deleted"
        )
    key = submission.payload_key
    db.delete(submission)
    db.commit()
    if key:
        _discard_object(storage, key)
    logger.info("Deleted published resource %s", submission_id)
