"""
Outgoing mail through the configured SMTP relay.
"""
import html
import logging
from email.message import EmailMessage
from typing import Optional, Sequence

import aiosmtplib

from app.config import Settings, get_settings
from app.core.errors import DeliveryFailed

logger = logging.getLogger(__name__)


class Mailer:
    """Sends one message to many recipients, each as a blind copy."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @staticmethod
    def build_bulk_message(sender: str, subject: str, body: str) -> EmailMessage:
        """
        Plain text with an escaped HTML alternative.

        The message is addressed to the sender. Recipients only appear in the
        SMTP envelope, never in a header.
        """
        message = EmailMessage()
        message["From"] = sender
        message["To"] = sender
        message["Subject"] = " ".join(subject.splitlines())
        message.set_content(body)
        message.add_alternative(f"<div>{html.escape(body)}</div>", subtype="html")
        return message

    async def send_bulk(
        self,
        sender: str,
        recipients: Sequence[str],
        subject: str,
        body: str,
    ) -> int:
        """
        Send one message blind-copied to every recipient.

        Returns:
            Number of recipients the relay accepted the message for

        Raises:
            DeliveryFailed: The relay was unreachable or refused the message
        """
        message = self.build_bulk_message(sender, subject, body)
        try:
            await aiosmtplib.send(
                message,
                sender=sender,
                recipients=[sender, *recipients],
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_username,
                password=self.settings.smtp_password,
                start_tls=self.settings.smtp_start_tls,
                timeout=self.settings.smtp_timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning(
                "Bulk email to %d recipients failed: %s", len(recipients), type(e).__name__
            )
            raise DeliveryFailed() from None

        logger.info("Bulk email sent to %d recipients", len(recipients))
        return len(recipients)
