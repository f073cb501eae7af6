"""Email service — sends OTP codes via async SMTP."""

from __future__ import annotations

import asyncio
import logging
from email.message import EmailMessage

import aiosmtplib

from otp_portal.config import settings
from otp_portal.errors import DeliveryError

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your OTP Code"


class EmailService:
    """Sends transactional emails using the configured SMTP server.

    Every send is bounded by ``settings.smtp_timeout_seconds``; SMTP
    errors, socket errors and the timeout all surface as
    :class:`DeliveryError`.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout if timeout is not None else settings.smtp_timeout_seconds

    async def send(self, to_email: str, subject: str, body: str) -> None:
        """Deliver a plain-text message to *to_email*."""
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = settings.email_from
        msg["To"] = to_email
        msg.set_content(body)

        logger.info("Sending '%s' to %s", subject, to_email)
        try:
            await asyncio.wait_for(
                aiosmtplib.send(
                    msg,
                    hostname=settings.smtp_host,
                    port=settings.smtp_port,
                    username=settings.smtp_username or None,
                    password=settings.smtp_password or None,
                    start_tls=settings.smtp_start_tls,
                ),
                timeout=self._timeout,
            )
        except TimeoutError as exc:
            logger.error("Timed out sending mail to %s after %ss", to_email, self._timeout)
            raise DeliveryError() from exc
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.exception("Failed to send mail to %s", to_email)
            raise DeliveryError() from exc

        logger.info("Mail sent to %s", to_email)

    async def send_otp(self, to_email: str, otp: str, ttl_seconds: int) -> None:
        """Send an OTP code with its validity window."""
        minutes = max(1, ttl_seconds // 60)
        body = f"Your OTP is {otp}. It expires in {minutes} minutes."
        await self.send(to_email, OTP_SUBJECT, body)
