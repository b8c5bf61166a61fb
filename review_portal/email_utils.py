"""Outbound email: signup codes and account decisions."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from review_portal.config import settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, to: str, subject: str, body: str) -> bool: ...


class SmtpNotifier:
    """Send plain-text mail through the configured SMTP relay."""

    def __init__(
        self,
        server: str = settings.SMTP_SERVER,
        port: int = settings.SMTP_PORT,
        username: str = settings.SMTP_USERNAME,
        password: str = settings.SMTP_PASSWORD,
        sender: str = settings.EMAIL_FROM,
        enabled: bool = settings.EMAIL_ENABLED,
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.enabled = enabled

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Deliver one message.

        Returns:
            True if the relay accepted the message, False otherwise
        """
        if not self.enabled:
            logger.info("Email disabled, not sending %r to %s", subject, to)
            return True

        msg = MIMEMultipart()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        try:
            with smtplib.SMTP(self.server, self.port, timeout=10) as server:
                server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.sender, to, msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Error sending email to %s: %s", to, exc)
            return False
        return True


def send_otp_email(notifier: Notifier, to_email: str, otp_code: str) -> bool:
    return notifier.send(
        to_email,
        "Your Verification OTP",
        f"Your OTP code is: {otp_code}. It will expire in {settings.OTP_EXPIRE_MINUTES} minutes.",
    )


def notify_best_effort(notifier: Notifier, to: str, subject: str, body: str) -> None:
    """Send a message whose delivery nothing depends on; failures are only logged."""
    try:
        delivered = notifier.send(to, subject, body)
    except Exception:
        logger.exception("Notifier raised while sending %r to %s", subject, to)
        return
    if not delivered:
        logger.warning("Notification %r to %s was not delivered", subject, to)
