import logging
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import List, Optional

import aiosmtplib

from ..utils.file_handler import format_file_size

logger = logging.getLogger(__name__)


@dataclass
class UploadNotice:
    file_name: str
    uploaded_by: str
    subject: str
    department: str
    category: str
    file_size: int = 0
    submission_id: Optional[str] = None


class Notifier:
    """Emails moderators when an upload lands in the review queue"""

    def __init__(
        self,
        host: Optional[str],
        port: int,
        username: Optional[str],
        password: Optional[str],
        from_email: str,
        recipients: List[str],
        dashboard_url: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.recipients = recipients
        self.dashboard_url = dashboard_url

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.recipients)

    def build_message(self, notice: UploadNotice) -> MIMEMultipart:
        rows = [
            ("File Name", notice.file_name),
            ("Subject", notice.subject),
            ("Department", notice.department),
            ("Category", notice.category),
            ("Size", format_file_size(notice.file_size)),
            ("Uploaded by", notice.uploaded_by),
        ]
        text = "A new file upload is pending your review.\n\n" + "\n".join(
            f"{label}: {value}" for label, value in rows
        )
        table = "".join(
            f"<tr><td><strong>{label}:</strong></td><td>{escape(str(value))}</td></tr>"
            for label, value in rows
        )
        html = (
            "<h1>New File Upload for Review</h1>"
            f"<table>{table}</table>"
            "<p><strong>Action Required:</strong> log in to the admin "
            "dashboard to approve or reject this upload.</p>"
        )
        if self.dashboard_url:
            text += f"\n\nReview it at {self.dashboard_url}"
            html += f'<p><a href="{self.dashboard_url}">Review in Admin Dashboard</a></p>'

        message = MIMEMultipart("alternative")
        message["Subject"] = "New File Upload Requires Review"
        message["From"] = self.from_email
        message["To"] = ", ".join(self.recipients)
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))
        return message

    async def send_upload_notification(self, notice: UploadNotice) -> bool:
        """Send the review notice. Never raises; returns True on delivery."""
        if not self.is_configured:
            logger.warning(
                "SMTP not configured, skipping notification for %s",
                notice.file_name,
            )
            return False

        try:
            await aiosmtplib.send(
                self.build_message(notice),
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=bool(self.username),
            )
        except Exception as e:
            logger.warning(
                "Failed to send upload notification for %s: %s",
                notice.file_name,
                e,
            )
            return False

        logger.info("Sent upload notification for %s", notice.file_name)
        return True
