from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import Literal, Optional


class AdminStats(BaseModel):
    total_resources: int
    total_downloads: int
    total_uploaders: int
    recent_uploads: int
    pending_review: int


class RoleGrant(BaseModel):
    email: EmailStr
    role: Literal["user", "moderator", "admin"]


class AdminResourceResponse(BaseModel):
    id: str
    title: str
    subject: str
    description: Optional[str] = None
    department: str
    category: str
    file_name: str
    file_size: int
    file_url: str
    download_count: int
    uploaded_by: str
    created_at: datetime
    uploader_email: str
    uploader_display_name: Optional[str] = None
    uploader_department: Optional[str] = None
