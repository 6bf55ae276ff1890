import pytest

from resource_hub.models.models import SubmissionStatus
from resource_hub.services import store
from resource_hub.services.moderation_service import ModerationService

PAYLOAD = b"%PDF-1.4 pending bytes"


@pytest.fixture
def make_pending(db, student):
    def _make_pending(title="Thermodynamics Notes", payload=PAYLOAD):
        submission = store.create(
            db,
            submitter=student,
            title=title,
            subject="Thermodynamics",
            department="Mechanical Engineering",
            category="study-material",
            file_name="thermo.pdf",
            content_type="application/pdf",
            payload=payload,
        )
        return store.hold_for_review(db, submission.id)

    return _make_pending


def test_list_pending_newest_first(client, moderator_headers, make_pending):
    first = make_pending("First")
    second = make_pending("Second")

    response = client.get("/moderation/pending", headers=moderator_headers)
    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [second.id, first.id]


def test_pending_requires_moderator(client, auth_headers):
    response = client.get("/moderation/pending", headers=auth_headers)
    assert response.status_code == 403


def test_moderator_can_download_staged_file(client, moderator_headers, make_pending):
    pending = make_pending()

    response = client.get(
        f"/moderation/pending/{pending.id}/file", headers=moderator_headers
    )
    assert response.status_code == 200
    assert response.content == PAYLOAD


def test_approve_publishes_original_bytes(client, moderator_headers, make_pending):
    pending = make_pending()

    response = client.post(
        f"/moderation/{pending.id}/decision",
        json={"decision": "approve"},
        headers=moderator_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "published"

    resource = client.get(f"/resources/{pending.id}").json()
    file_path = resource["file_url"].replace("http://testserver", "")
    downloaded = client.get(file_path)
    assert downloaded.status_code == 200
    assert downloaded.content == PAYLOAD

    assert client.get("/moderation/pending", headers=moderator_headers).json() == []


def test_reject_purges_payload_and_keeps_note(
    client, db, moderator_headers, moderator, make_pending
):
    pending = make_pending()

    response = client.post(
        f"/moderation/{pending.id}/decision",
        json={"decision": "reject", "note": "duplicate"},
        headers=moderator_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "rejected"
    assert body["review_note"] == "duplicate"

    staged = client.get(
        f"/moderation/pending/{pending.id}/file", headers=moderator_headers
    )
    assert staged.status_code == 404
    assert client.get(f"/resources/{pending.id}").status_code == 404

    db.expire_all()
    rejected = store.get(db, pending.id)
    assert rejected.staged_payload is None
    assert rejected.payload_key is None
    assert rejected.reviewed_by == moderator.user_id


def test_decision_on_finalized_submission_conflicts(
    client, db, moderator_headers, make_pending
):
    pending = make_pending()
    client.post(
        f"/moderation/{pending.id}/decision",
        json={"decision": "reject"},
        headers=moderator_headers,
    )

    response = client.post(
        f"/moderation/{pending.id}/decision",
        json={"decision": "approve"},
        headers=moderator_headers,
    )
    assert response.status_code == 409

    db.expire_all()
    assert store.get(db, pending.id).status == SubmissionStatus.REJECTED.value


def test_decision_on_unknown_submission(client, moderator_headers):
    response = client.post(
        "/moderation/nope/decision",
        json={"decision": "approve"},
        headers=moderator_headers,
    )
    assert response.status_code == 404


def test_invalid_decision_value(client, moderator_headers, make_pending):
    pending = make_pending()
    response = client.post(
        f"/moderation/{pending.id}/decision",
        json={"decision": "maybe"},
        headers=moderator_headers,
    )
    assert response.status_code == 422


def test_service_list_pending_is_a_snapshot(db, storage, moderator, make_pending):
    service = ModerationService(storage)
    pending = make_pending()

    snapshot = service.list_pending(db)
    service.decide(db, pending.id, "approve", moderator)

    assert [s.id for s in snapshot] == [pending.id]
    assert service.list_pending(db) == []
