import json
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional, List, Literal


class VerdictResponse(BaseModel):
    isStudyRelated: bool
    confidence: float
    summary: str
    categories: List[str] = []
    reasoning: str


class IntakeResponse(BaseModel):
    id: str
    status: str
    file_url: Optional[str] = None

    class Config:
        from_attributes = True


class SubmissionResponse(BaseModel):
    id: str
    title: str
    subject: str
    description: Optional[str] = None
    department: str
    category: str
    uploaded_by: str
    file_name: str
    file_size: int
    status: str
    ai_analysis: Optional[VerdictResponse] = None
    review_note: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("ai_analysis", mode="before")
    @classmethod
    def _parse_stored_verdict(cls, value):
        if isinstance(value, str):
            return json.loads(value)
        return value


class ResourceResponse(BaseModel):
    id: str
    title: str
    subject: str
    description: Optional[str] = None
    department: str
    category: str
    uploaded_by: str
    file_name: str
    file_size: int
    file_url: str
    download_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class ReviewDecision(BaseModel):
    decision: Literal["approve", "reject"]
    note: Optional[str] = None
