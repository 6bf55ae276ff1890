"""Domain errors raised by the intake and moderation services.

Routers translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""


class ResourceHubError(Exception):
    """Base class for all domain errors."""


class ExtractionError(ResourceHubError):
    """The uploaded document could not be parsed into text."""


class ClassifierUnavailable(ResourceHubError):
    """The relevance classifier produced no usable verdict."""


class StorageWriteFailure(ResourceHubError):
    """A durable storage write failed while publishing a submission."""


class SubmissionNotFound(ResourceHubError):
    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} not found")


class InvalidStateTransition(ResourceHubError):
    def __init__(self, submission_id: str, current: str, target: str):
        self.submission_id = submission_id
        self.current = current
        self.target = target
        super().__init__(
            f"Submission {submission_id} cannot move from "
            f"'{current}' to '{target}'"
        )
