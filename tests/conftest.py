"""Shared pytest fixtures for the Resource Hub tests.

Provides:
- ``db``: session bound to a fresh SQLite file per test
- ``storage``: LocalStorage rooted in the test's tmp dir
- ``classifier``: FakeClassifier returning a configurable verdict
- ``notifier``: RecordingNotifier capturing review notices
- ``client``: TestClient with all of the above wired in
- ``make_user`` / ``*_headers``: users and bearer tokens by role
- ``make_pdf``: builds small text PDFs
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from resource_hub.main import app
from resource_hub.database import Base, get_db
from resource_hub.dependencies import get_classifier, get_notifier, get_storage
from resource_hub.exceptions import ClassifierUnavailable
from resource_hub.models.models import User, UserRole
from resource_hub.services.classifier import Verdict
from resource_hub.services.storage import LocalStorage
from resource_hub.utils.security import create_access_token, get_password_hash


def build_pdf(page_texts):
    """Assemble a minimal PDF with one line of Helvetica text per page."""
    page_ids = [4 + 2 * i for i in range(len(page_texts))]
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(page_ids)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, text in zip(page_ids, page_texts):
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                "/Resources << /Font << /F1 3 0 R >> >> "
                f"/Contents {page_id + 1} 0 R >>"
            ).encode()
        )
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode()
        objects.append(
            b"<< /Length %d >>\nstream\n" % len(stream)
            + stream
            + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_at}\n%%EOF\n"
    ).encode()
    return bytes(out)


class FakeClassifier:
    """Stands in for the LLM; returns ``verdict`` or raises ``error``."""

    def __init__(self, verdict=None, error=None):
        self.verdict = verdict
        self.error = error
        self.calls = []

    def classify(self, excerpt, filename):
        self.calls.append((excerpt, filename))
        if self.error is not None:
            raise self.error
        if self.verdict is None:
            raise ClassifierUnavailable("no verdict configured")
        return self.verdict


class RecordingNotifier:
    def __init__(self):
        self.notices = []

    async def send_upload_notification(self, notice):
        self.notices.append(notice)
        return True


def make_verdict(study_related=True, confidence=85):
    return Verdict(
        isStudyRelated=study_related,
        confidence=confidence,
        summary="Midterm exam for data structures",
        categories=["exam", "computer science"],
        reasoning="Contains numbered exam questions",
    )


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def db_sessionmaker(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(db_sessionmaker):
    session = db_sessionmaker()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "objects"), "http://testserver/files")


@pytest.fixture
def classifier():
    return FakeClassifier(verdict=make_verdict())


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db_sessionmaker, storage, classifier, notifier):
    def override_get_db():
        session = db_sessionmaker()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_classifier] = lambda: classifier
    app.dependency_overrides[get_notifier] = lambda: notifier

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(username="student", role=UserRole.USER):
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=get_password_hash("testpass123"),
            display_name=username.title(),
            department="Computer Science",
            role=role.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def headers_for(user):
    token = create_access_token({"sub": str(user.user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student(make_user):
    return make_user("student")


@pytest.fixture
def moderator(make_user):
    return make_user("moderator", UserRole.MODERATOR)


@pytest.fixture
def admin(make_user):
    return make_user("admin", UserRole.ADMIN)


@pytest.fixture
def auth_headers(student):
    return headers_for(student)


@pytest.fixture
def moderator_headers(moderator):
    return headers_for(moderator)


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)
