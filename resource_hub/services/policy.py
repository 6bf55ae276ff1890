import enum
from typing import Optional
from .classifier import Verdict

DEFAULT_THRESHOLD = 70


class Decision(str, enum.Enum):
    AUTO_PUBLISH = "auto-publish"
    HOLD_FOR_REVIEW = "hold-for-review"


def decide(
    verdict: Optional[Verdict], threshold: float = DEFAULT_THRESHOLD
) -> Decision:
    """Fail closed: anything short of a confident study verdict goes to a human."""
    if (
        verdict is not None
        and verdict.is_study_related
        and verdict.confidence > threshold
    ):
        return Decision.AUTO_PUBLISH
    return Decision.HOLD_FOR_REVIEW


def route_unclassified(auto_publish: bool = False) -> Decision:
    """Routing for document types that skip extraction and classification."""
    if auto_publish:
        return Decision.AUTO_PUBLISH
    return Decision.HOLD_FOR_REVIEW
