"""SQLAlchemy Idea model — stored in the separate forms database."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class FormBase(DeclarativeBase):
    """Declarative base for the forms database."""


class Idea(FormBase):
    """An employee's idea submission, optionally with an attached file."""

    __tablename__ = "idea_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_name: Mapped[str | None] = mapped_column(String(256))
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    employee_function: Mapped[str | None] = mapped_column(String(256))
    location: Mapped[str | None] = mapped_column(String(256))
    idea_theme: Mapped[str | None] = mapped_column(String(256))
    department: Mapped[str | None] = mapped_column(String(256))
    benefits_category: Mapped[str | None] = mapped_column(String(256))
    idea_description: Mapped[str | None] = mapped_column(Text)
    impacted_process: Mapped[str | None] = mapped_column(String(256))
    expected_benefits_value: Mapped[str | None] = mapped_column(String(256))
    attachment: Mapped[str | None] = mapped_column(
        String(512), doc="Stored filename under the upload directory"
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return f"<Idea id={self.id} employee_id={self.employee_id!r}>"
