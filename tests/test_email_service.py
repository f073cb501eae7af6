"""Tests for the EmailService — message contents and failure mapping."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from otp_portal.errors import DeliveryError
from otp_portal.services.email_service import OTP_SUBJECT, EmailService


@pytest.mark.asyncio
async def test_send_otp_builds_message():
    with patch("otp_portal.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
        await EmailService().send_otp("alice@example.com", "1234", 300)

    msg = send.call_args.args[0]
    assert msg["To"] == "alice@example.com"
    assert msg["Subject"] == OTP_SUBJECT
    assert "Your OTP is 1234. It expires in 5 minutes." in msg.get_content()


@pytest.mark.asyncio
async def test_smtp_error_becomes_delivery_error():
    failing = AsyncMock(side_effect=aiosmtplib.SMTPException("relay denied"))
    with patch("otp_portal.services.email_service.aiosmtplib.send", new=failing):
        with pytest.raises(DeliveryError):
            await EmailService().send("alice@example.com", "Hi", "body")


@pytest.mark.asyncio
async def test_connection_error_becomes_delivery_error():
    failing = AsyncMock(side_effect=ConnectionRefusedError())
    with patch("otp_portal.services.email_service.aiosmtplib.send", new=failing):
        with pytest.raises(DeliveryError):
            await EmailService().send("alice@example.com", "Hi", "body")


@pytest.mark.asyncio
async def test_hung_send_times_out():
    async def _hang(*args, **kwargs):
        await asyncio.sleep(10)

    with patch("otp_portal.services.email_service.aiosmtplib.send", new=_hang):
        with pytest.raises(DeliveryError):
            await EmailService(timeout=0.01).send("alice@example.com", "Hi", "body")
