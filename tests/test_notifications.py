import asyncio

from resource_hub.services.notifications import Notifier, UploadNotice


def _notifier(**overrides):
    options = dict(
        host="smtp.example.com",
        port=587,
        username=None,
        password=None,
        from_email="noreply@example.com",
        recipients=["mod1@example.com", "mod2@example.com"],
        dashboard_url="https://hub.example.com/admin/review",
    )
    options.update(overrides)
    return Notifier(**options)


NOTICE = UploadNotice(
    file_name="notes<1>.pdf",
    uploaded_by="Student",
    subject="Algorithms",
    department="Computer Science",
    category="study-material",
    file_size=2048,
)


def _parts(message):
    return {
        part.get_content_type(): part.get_payload(decode=True).decode()
        for part in message.walk()
        if not part.is_multipart()
    }


def test_build_message():
    message = _notifier().build_message(NOTICE)

    assert message["Subject"] == "New File Upload Requires Review"
    assert message["From"] == "noreply@example.com"
    assert message["To"] == "mod1@example.com, mod2@example.com"

    parts = _parts(message)
    assert "File Name: notes<1>.pdf" in parts["text/plain"]
    assert "Size: 2.0 KB" in parts["text/plain"]
    assert "https://hub.example.com/admin/review" in parts["text/plain"]
    assert "notes&lt;1&gt;.pdf" in parts["text/html"]
    assert "notes<1>.pdf" not in parts["text/html"]


def test_unconfigured_notifier_skips():
    assert not _notifier(host=None).is_configured
    assert not _notifier(recipients=[]).is_configured
    assert asyncio.run(_notifier(host=None).send_upload_notification(NOTICE)) is False


def test_delivery_failure_is_swallowed():
    notifier = _notifier(host="127.0.0.1", port=1)
    assert asyncio.run(notifier.send_upload_notification(NOTICE)) is False
