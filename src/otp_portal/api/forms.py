"""Idea submission routes — multipart form with an optional attachment."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_portal.config import settings
from otp_portal.database.engine import get_form_session
from otp_portal.errors import SubmissionError
from otp_portal.models.idea import Idea
from otp_portal.services.attachment_store import AttachmentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["forms"])


def get_attachment_store() -> AttachmentStore:
    return AttachmentStore(settings.upload_dir)


class IdeaOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )

    id: int
    employee_name: str | None = None
    employee_id: str
    employee_function: str | None = None
    location: str | None = None
    idea_theme: str | None = None
    department: str | None = None
    benefits_category: str | None = None
    idea_description: str | None = None
    impacted_process: str | None = None
    expected_benefits_value: str | None = None
    attachment: str | None = None
    submitted_at: datetime


@router.post("/submit-form", status_code=status.HTTP_201_CREATED)
async def submit_form(
    employee_id: str | None = Form(None, alias="employeeId"),
    employee_name: str | None = Form(None, alias="employeeName"),
    employee_function: str | None = Form(None, alias="employeeFunction"),
    location: str | None = Form(None),
    idea_theme: str | None = Form(None, alias="ideaTheme"),
    department: str | None = Form(None),
    benefits_category: str | None = Form(None, alias="benefitsCategory"),
    idea_description: str | None = Form(None, alias="ideaDescription"),
    impacted_process: str | None = Form(None, alias="impactedProcess"),
    expected_benefits_value: str | None = Form(None, alias="expectedBenefitsValue"),
    attachment: UploadFile | None = File(None),
    session: AsyncSession = Depends(get_form_session),
    store: AttachmentStore = Depends(get_attachment_store),
) -> dict:
    """Store an idea and, if present, its attachment."""
    if not employee_id:
        raise SubmissionError("Employee ID is required", status.HTTP_400_BAD_REQUEST)

    stored_name = None
    if attachment is not None and attachment.filename:
        try:
            stored_name = await store.save(employee_id, attachment)
        except OSError as exc:
            logger.exception("Failed to store attachment for %s", employee_id)
            raise SubmissionError("Error submitting form") from exc

    idea = Idea(
        employee_id=employee_id,
        employee_name=employee_name,
        employee_function=employee_function,
        location=location,
        idea_theme=idea_theme,
        department=department,
        benefits_category=benefits_category,
        idea_description=idea_description,
        impacted_process=impacted_process,
        expected_benefits_value=expected_benefits_value,
        attachment=stored_name,
    )
    try:
        session.add(idea)
        await session.commit()
    except SQLAlchemyError as exc:
        logger.exception("Failed to save idea for %s", employee_id)
        raise SubmissionError("Error submitting form") from exc

    logger.info("Idea %s submitted by %s", idea.id, employee_id)
    return {"message": "Form Submitted Successfully!"}


@router.get("/submissions", response_model=list[IdeaOut])
async def list_submissions(session: AsyncSession = Depends(get_form_session)):
    """Return every stored idea, oldest first."""
    try:
        result = await session.execute(select(Idea).order_by(Idea.id))
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch submissions")
        raise SubmissionError("Error fetching submissions") from exc
    return result.scalars().all()
