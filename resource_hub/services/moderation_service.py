import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..exceptions import SubmissionNotFound
from ..models.models import Submission, SubmissionStatus
from . import store

logger = logging.getLogger(__name__)


class ModerationService:
    """Human review queue for submissions the admission policy held back."""

    def __init__(self, storage):
        self.storage = storage

    def list_pending(self, db: Session) -> List[Submission]:
        return store.list_by_status(db, SubmissionStatus.PENDING_REVIEW)

    def staged_file(self, db: Session, submission_id: str) -> Submission:
        submission = store.get(db, submission_id)
        if submission.status != SubmissionStatus.PENDING_REVIEW.value:
            raise SubmissionNotFound(submission_id)
        return submission

    def decide(
        self,
        db: Session,
        submission_id: str,
        decision: str,
        reviewer,
        note: Optional[str] = None,
    ) -> Submission:
        """Approve or reject a pending submission.

        Rejection destroys the staged bytes and cannot be undone.
        """
        submission = store.finalize_review(
            db,
            submission_id,
            decision,
            self.storage,
            note=note,
            reviewer=reviewer,
        )
        logger.info(
            "Reviewer %s chose %s for submission %s",
            reviewer.user_id,
            decision,
            submission_id,
        )
        return submission
