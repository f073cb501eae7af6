"""Seed script — populates the OTP database with sample identities."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from otp_portal.database.engine import dispose_db, init_db, otp_session_factory
from otp_portal.models.identity import Admin, User

SAMPLE_USERS = [
    User(corporate_id="EMP100", email="alice@example.com", role="user"),
    User(corporate_id="EMP101", email="bob@example.com", role="user"),
]

SAMPLE_ADMINS = [
    Admin(corporate_id="EMP001", email="carol@example.com", role="admin"),
]


async def seed() -> None:
    """Insert sample users and admins into the OTP database."""
    await init_db()
    async with otp_session_factory() as session:
        session: AsyncSession
        session.add_all(SAMPLE_USERS + SAMPLE_ADMINS)
        await session.commit()
    await dispose_db()
    print(
        f"✅ Seeded {len(SAMPLE_USERS)} users and "
        f"{len(SAMPLE_ADMINS)} admins into the database."
    )


if __name__ == "__main__":
    asyncio.run(seed())
