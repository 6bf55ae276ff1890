from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .models.models import User, UserRole
from .services.classifier import RelevanceClassifier
from .services.intake import IntakeService
from .services.moderation_service import ModerationService
from .services.notifications import Notifier
from .services.storage import LocalStorage, S3Storage
from .utils.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login")


def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if not payload or "sub" not in payload:
        raise credentials_exception

    user = db.query(User).filter(User.user_id == int(payload["sub"])).first()
    if not user:
        raise credentials_exception
    return user


def require_moderator(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_moderator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Moderator access required",
        )
    return current_user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@lru_cache
def get_storage():
    if settings.storage_backend == "s3":
        return S3Storage(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            public_base_url=settings.s3_public_base_url,
        )
    return LocalStorage(settings.upload_dir, settings.public_base_url)


@lru_cache
def get_classifier() -> RelevanceClassifier:
    return RelevanceClassifier(
        api_key=settings.classifier_api_key,
        base_url=settings.classifier_base_url,
        model=settings.classifier_model,
        timeout=settings.classifier_timeout,
        char_budget=settings.classifier_char_budget,
    )


@lru_cache
def get_notifier() -> Notifier:
    return Notifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        from_email=settings.email_from,
        recipients=settings.moderator_emails,
        dashboard_url=settings.admin_dashboard_url,
    )


def get_intake_service(
    classifier: RelevanceClassifier = Depends(get_classifier),
    storage=Depends(get_storage),
) -> IntakeService:
    return IntakeService(
        classifier=classifier,
        storage=storage,
        page_limit=settings.extract_page_limit,
        threshold=settings.auto_publish_threshold,
        auto_publish_unclassified=settings.auto_publish_unclassified,
    )


def get_moderation_service(storage=Depends(get_storage)) -> ModerationService:
    return ModerationService(storage)
