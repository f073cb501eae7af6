"""Database engines and async session factories.

The OTP credentials and the idea submissions live in separate databases,
so there is one engine and one session factory for each.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from otp_portal.config import settings
from otp_portal.models.idea import FormBase
from otp_portal.models.identity import Base

otp_engine = create_async_engine(settings.otp_database_url, echo=settings.debug)
form_engine = create_async_engine(settings.form_database_url, echo=settings.debug)

otp_session_factory = async_sessionmaker(otp_engine, expire_on_commit=False)
form_session_factory = async_sessionmaker(form_engine, expire_on_commit=False)


async def init_db() -> None:
    """Create all tables that don't yet exist."""
    async with otp_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with form_engine.begin() as conn:
        await conn.run_sync(FormBase.metadata.create_all)


async def dispose_db() -> None:
    """Release pooled connections on shutdown."""
    await otp_engine.dispose()
    await form_engine.dispose()


async def get_otp_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on the OTP database, rolling back on error."""
    async with otp_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_form_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on the forms database, rolling back on error."""
    async with form_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
