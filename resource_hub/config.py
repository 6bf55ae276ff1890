from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./resource_hub.db"

    # Security
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # File Upload
    max_file_size: int = 10485760  # 10MB
    allowed_extensions: List[str] = [
        ".pdf", ".doc", ".docx", ".ppt", ".pptx", ".txt"
    ]

    # Durable storage
    storage_backend: str = "local"  # local | s3
    upload_dir: str = "./uploads"
    public_base_url: str = "http://localhost:8000/files"
    s3_bucket: Optional[str] = None
    s3_region: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_public_base_url: Optional[str] = None

    # Relevance classifier
    classifier_api_key: Optional[str] = None
    classifier_base_url: str = "https://api.openai.com/v1"
    classifier_model: str = "gpt-4o-mini"
    classifier_timeout: float = 30.0
    classifier_char_budget: int = 8000
    extract_page_limit: int = 5

    # Admission policy
    auto_publish_threshold: float = 70
    auto_publish_unclassified: bool = False

    # Notifications
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    email_from: str = "Resource Hub <noreply@resource-hub.local>"
    moderator_emails: List[str] = []
    admin_dashboard_url: str = "http://localhost:5173/admin"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
