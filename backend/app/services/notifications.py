"""
Notification collaborator - sends the account verification email to a
newly added student.

Failures are reported by raising NotificationError; the student service
treats them as non-fatal.
"""

import smtplib
from datetime import datetime, timedelta, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

import jwt

from app.config import Settings
from app.errors import NotificationError
from app.logging_config import get_logger, log_with_context

logger = get_logger("notify")

VERIFICATION_SUBJECT = "Verify your school account"


class Notifier(Protocol):
    def send_account_verification_email(self, user_id: int, email: str) -> None:
        ...


def create_verification_token(settings: Settings, user_id: int, email: str) -> str:
    """Signed, expiring token embedded in the verification link."""
    now = datetime.now(tz=timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "purpose": "account-verification",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.verification_token_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_verification_secret, algorithm=settings.jwt_algorithm)


def build_verification_link(settings: Settings, user_id: int, email: str) -> str:
    token = create_verification_token(settings, user_id, email)
    return f"{settings.app_base_url.rstrip('/')}/auth/verify-account/{token}"


class SmtpNotifier:
    """Sends verification emails through the configured SMTP server."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _message(self, email: str, link: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = VERIFICATION_SUBJECT
        msg["From"] = self.settings.mail_from or ""
        msg["To"] = email
        msg.attach(MIMEText(
            f"Your student account has been created.\n\nVerify it here: {link}\n", "plain"))
        msg.attach(MIMEText(
            f'<p>Your student account has been created.</p>'
            f'<p><a href="{link}">Verify your account</a></p>', "html"))
        return msg

    def send_account_verification_email(self, user_id: int, email: str) -> None:
        """
        Raises:
            NotificationError: SMTP not configured, or the send failed
        """
        if not self.settings.smtp_host:
            log_with_context(logger, "WARNING", "SMTP not configured - verification email skipped",
                             context={"user_id": user_id})
            raise NotificationError("SMTP not configured")

        link = build_verification_link(self.settings, user_id, email)
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as server:
                if self.settings.smtp_use_tls:
                    server.starttls()
                if self.settings.smtp_username and self.settings.smtp_password:
                    server.login(self.settings.smtp_username, self.settings.smtp_password)
                server.send_message(self._message(email, link))
        except (smtplib.SMTPException, OSError) as e:
            log_with_context(logger, "ERROR", "Verification email failed",
                             context={"user_id": user_id}, exc_info=e)
            raise NotificationError(str(e)) from e

        log_with_context(logger, "INFO", "Verification email sent",
                         context={"user_id": user_id, "email": email})
