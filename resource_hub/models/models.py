import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    LargeBinary,
    ForeignKey,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, validates
from ..database import Base
from ..exceptions import InvalidStateTransition


class UserRole(str, enum.Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class Category(str, enum.Enum):
    QUESTION_PAPER = "question-paper"
    STUDY_MATERIAL = "study-material"
    LAB_MANUAL = "lab-manual"


class SubmissionStatus(str, enum.Enum):
    INTAKE = "intake"
    PENDING_REVIEW = "pending-review"
    PUBLISHED = "published"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS = {
    SubmissionStatus.INTAKE: {
        SubmissionStatus.PENDING_REVIEW,
        SubmissionStatus.PUBLISHED,
    },
    SubmissionStatus.PENDING_REVIEW: {
        SubmissionStatus.PUBLISHED,
        SubmissionStatus.REJECTED,
    },
    SubmissionStatus.PUBLISHED: set(),
    SubmissionStatus.REJECTED: set(),
}


def validate_transition(submission_id, current, target):
    """Raise InvalidStateTransition unless current -> target is allowed."""
    current = SubmissionStatus(current)
    target = SubmissionStatus(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStateTransition(
            str(submission_id), current.value, target.value
        )


def _new_id():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(100))
    department = Column(String(100))
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    created_at = Column(DateTime, server_default=func.now())

    submissions = relationship(
        "Submission",
        back_populates="submitter",
        foreign_keys="Submission.submitter_id",
    )

    @property
    def is_moderator(self):
        return self.role in (UserRole.MODERATOR.value, UserRole.ADMIN.value)


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=_new_id)

    # Immutable intake fields
    title = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    description = Column(Text)
    department = Column(String(100), nullable=False)
    category = Column(String(30), nullable=False)
    submitter_id = Column(
        Integer, ForeignKey("users.user_id"), nullable=False
    )
    uploaded_by = Column(String(100), nullable=False)
    file_name = Column(String(255), nullable=False)
    content_type = Column(String(100))
    file_size = Column(Integer, nullable=False)

    # Payload: inline while staged, object key + public ref once published
    staged_payload = Column(LargeBinary)
    payload_key = Column(String(512))
    file_url = Column(String(1024))

    ai_analysis = Column(Text)
    status = Column(
        String(20), nullable=False, default=SubmissionStatus.INTAKE.value
    )
    review_note = Column(Text)
    reviewed_by = Column(Integer, ForeignKey("users.user_id"))
    reviewed_at = Column(DateTime)
    download_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    submitter = relationship(
        "User", back_populates="submissions", foreign_keys=[submitter_id]
    )

    @validates("ai_analysis")
    def _verdict_is_write_once(self, key, value):
        if self.ai_analysis is not None and value != self.ai_analysis:
            raise ValueError(
                f"Verdict for submission {self.id} is already recorded"
            )
        return value
