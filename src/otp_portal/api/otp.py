"""OTP routes — request, resend and verify.

Failures raise :class:`~otp_portal.errors.OTPError` subclasses, which the
application-level handler in ``main`` turns into JSON responses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from otp_portal.database.engine import get_otp_session
from otp_portal.services.email_service import EmailService
from otp_portal.services.otp_manager import OTPLifecycleManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["otp"])

# Shared mail sender (created once, reused across requests)
_email_service = EmailService()


def get_email_service() -> EmailService:
    return _email_service


def get_otp_manager(
    session: AsyncSession = Depends(get_otp_session),
    email_service: EmailService = Depends(get_email_service),
) -> OTPLifecycleManager:
    return OTPLifecycleManager(session, email_service)


# ── Request / response models ────────────────────────────

class OTPRequest(BaseModel):
    # Codes sent as JSON numbers are accepted and compared as strings.
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    corporate_id: str = Field(alias="corporateId")


class OTPVerifyRequest(OTPRequest):
    otp: str


class MessageResponse(BaseModel):
    message: str


class VerifyResponse(BaseModel):
    message: str
    role: str | None = None


# ── Endpoints ────────────────────────────────────────────

@router.post("/request-otp", response_model=MessageResponse)
async def request_otp(
    body: OTPRequest, manager: OTPLifecycleManager = Depends(get_otp_manager)
):
    """Generate an OTP for the corporate ID and email it."""
    await manager.request_otp(body.corporate_id)
    return MessageResponse(message="OTP sent successfully")


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    body: OTPRequest, manager: OTPLifecycleManager = Depends(get_otp_manager)
):
    """Replace any pending OTP with a new one and email it."""
    await manager.resend_otp(body.corporate_id)
    return MessageResponse(message="OTP sent successfully")


@router.post(
    "/verify-otp", response_model=VerifyResponse, response_model_exclude_none=True
)
async def verify_otp(
    body: OTPVerifyRequest, manager: OTPLifecycleManager = Depends(get_otp_manager)
):
    """Check the OTP; on success it is consumed."""
    result = await manager.verify_otp(body.corporate_id, body.otp)
    return VerifyResponse(message="Login successful", role=result.role)
