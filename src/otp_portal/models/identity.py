"""SQLAlchemy identity models — the user and admin credential collections."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for the OTP database."""


class IdentityMixin:
    """Columns shared by both identity collections.

    ``otp`` and ``otp_expiry`` are always written and cleared together;
    both are ``NULL`` while no challenge is outstanding.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    corporate_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[str | None] = mapped_column(String(64), nullable=True)
    otp: Mapped[str | None] = mapped_column(String(16), nullable=True)
    otp_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} id={self.id} "
            f"corporate_id={self.corporate_id!r} role={self.role!r}>"
        )


class User(IdentityMixin, Base):
    """A regular employee allowed to log in with an OTP."""

    __tablename__ = "user_credentials"


class Admin(IdentityMixin, Base):
    """An administrator; same protocol, separate collection."""

    __tablename__ = "admin_credentials"
