import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import ClassifierUnavailable, ExtractionError, StorageWriteFailure
from ..models.models import Submission
from ..utils.file_handler import is_pdf
from . import store
from .classifier import RelevanceClassifier, Verdict
from .extractor import DEFAULT_PAGE_LIMIT, extract_text
from .policy import DEFAULT_THRESHOLD, Decision, decide, route_unclassified

logger = logging.getLogger(__name__)


@dataclass
class IntakeFields:
    title: str
    subject: str
    department: str
    category: str
    description: Optional[str] = None


class IntakeService:
    """Runs a new upload through extraction, classification and admission."""

    def __init__(
        self,
        classifier: RelevanceClassifier,
        storage,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        threshold: float = DEFAULT_THRESHOLD,
        auto_publish_unclassified: bool = False,
    ):
        self.classifier = classifier
        self.storage = storage
        self.page_limit = page_limit
        self.threshold = threshold
        self.auto_publish_unclassified = auto_publish_unclassified

    def evaluate(self, data: bytes, filename: str) -> Optional[Verdict]:
        """Return a verdict, or None when extraction or classification fails."""
        try:
            excerpt = extract_text(data, self.page_limit)
        except ExtractionError as e:
            logger.warning("Skipping classification of %s: %s", filename, e)
            return None
        try:
            return self.classifier.classify(excerpt, filename)
        except ClassifierUnavailable as e:
            logger.warning("Classifier unavailable for %s: %s", filename, e)
            return None

    def submit(
        self,
        db: Session,
        submitter,
        fields: IntakeFields,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> Submission:
        submission = store.create(
            db,
            submitter=submitter,
            title=fields.title,
            subject=fields.subject,
            description=fields.description,
            department=fields.department,
            category=fields.category,
            file_name=filename,
            content_type=content_type,
            payload=data,
        )

        if is_pdf(filename, content_type):
            verdict = self.evaluate(data, filename)
            store.record_verdict(db, submission, verdict)
            decision = decide(verdict, self.threshold)
        else:
            decision = route_unclassified(self.auto_publish_unclassified)

        logger.info(
            "Admission decision for %s: %s", submission.id, decision.value
        )

        if decision == Decision.AUTO_PUBLISH:
            try:
                return store.promote_to_published(
                    db, submission.id, self.storage
                )
            except StorageWriteFailure as e:
                logger.error(
                    "Publishing %s failed, holding for review: %s",
                    submission.id,
                    e,
                )
        return store.hold_for_review(db, submission.id)
