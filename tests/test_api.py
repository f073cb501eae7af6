"""HTTP tests for the OTP routes and the error mapping."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from otp_portal.api.otp import get_email_service, get_otp_manager
from otp_portal.database.engine import get_otp_session
from otp_portal.errors import DeliveryError
from otp_portal.main import app
from otp_portal.models.identity import Admin, Base, User
from otp_portal.services.email_service import EmailService
from otp_portal.services.otp_manager import OTPLifecycleManager

# ── In-memory test database ─────────────────────────────
_test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)
_test_session_factory = async_sessionmaker(_test_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session():
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with _test_session_factory() as session:
        session.add_all(
            [
                User(corporate_id="EMP100", email="alice@example.com", role="user"),
                Admin(corporate_id="EMP001", email="carol@example.com", role="admin"),
                Admin(
                    corporate_id="EMP002",
                    email="dave@example.com",
                    role="admin",
                    otp="5555",
                    otp_expiry=datetime.now(UTC) - timedelta(minutes=1),
                ),
            ]
        )
        await session.commit()
        yield session

    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def email_service():
    svc = EmailService()
    svc.send_otp = AsyncMock()
    return svc


@pytest_asyncio.fixture
async def client(db_session, email_service):
    """HTTP client wired to the test database and the mocked mailer."""

    async def _session_override():
        yield db_session

    app.dependency_overrides[get_otp_session] = _session_override
    app.dependency_overrides[get_email_service] = lambda: email_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


def _sent_code(email_service) -> str:
    return email_service.send_otp.call_args.args[1]


@pytest.mark.asyncio
async def test_request_and_verify(client, email_service):
    resp = await client.post("/request-otp", json={"corporateId": "EMP001"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "OTP sent successfully"}
    code = _sent_code(email_service)

    resp = await client.post("/verify-otp", json={"corporateId": "EMP001", "otp": code})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Login successful", "role": "admin"}

    resp = await client.post("/verify-otp", json={"corporateId": "EMP001", "otp": code})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid OTP"}


@pytest.mark.asyncio
async def test_request_unknown(client, email_service):
    resp = await client.post("/request-otp", json={"corporateId": "UNKNOWN"})
    assert resp.status_code == 404
    assert resp.json() == {"message": "Corporate ID not found"}
    email_service.send_otp.assert_not_called()


@pytest.mark.asyncio
async def test_resend_replaces_code(client, db_session, email_service):
    codes = iter(["1111", "2222"])
    app.dependency_overrides[get_otp_manager] = lambda: OTPLifecycleManager(
        db_session, email_service, generator=lambda: next(codes)
    )

    resp = await client.post("/request-otp", json={"corporateId": "EMP100"})
    assert resp.status_code == 200
    resp = await client.post("/resend-otp", json={"corporateId": "EMP100"})
    assert resp.status_code == 200
    assert _sent_code(email_service) == "2222"

    resp = await client.post("/verify-otp", json={"corporateId": "EMP100", "otp": "1111"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid OTP"}

    resp = await client.post("/verify-otp", json={"corporateId": "EMP100", "otp": "2222"})
    assert resp.status_code == 200
    assert resp.json()["role"] == "user"


@pytest.mark.asyncio
async def test_verify_accepts_numeric_code(client, email_service):
    await client.post("/request-otp", json={"corporateId": "EMP001"})
    code = _sent_code(email_service)

    resp = await client.post(
        "/verify-otp", json={"corporateId": "EMP001", "otp": int(code)}
    )
    assert resp.status_code == 200
    assert resp.json() == {"message": "Login successful", "role": "admin"}


@pytest.mark.asyncio
async def test_role_omitted_when_disabled(client, db_session, email_service):
    app.dependency_overrides[get_otp_manager] = lambda: OTPLifecycleManager(
        db_session, email_service, return_role=False
    )

    await client.post("/request-otp", json={"corporateId": "EMP001"})
    code = _sent_code(email_service)

    resp = await client.post("/verify-otp", json={"corporateId": "EMP001", "otp": code})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Login successful"}


@pytest.mark.asyncio
async def test_verify_expired(client):
    resp = await client.post("/verify-otp", json={"corporateId": "EMP002", "otp": "5555"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "OTP expired"}


@pytest.mark.asyncio
async def test_delivery_failure_is_server_error(client, email_service):
    email_service.send_otp.side_effect = DeliveryError()
    resp = await client.post("/request-otp", json={"corporateId": "EMP100"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Server error"}


@pytest.mark.asyncio
async def test_missing_field_is_rejected(client):
    resp = await client.post("/verify-otp", json={"corporateId": "EMP100"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_storage_failure_is_server_error(client):
    broken = MagicMock()
    broken.execute = AsyncMock(side_effect=SQLAlchemyError("database is locked"))

    async def _broken_session():
        yield broken

    app.dependency_overrides[get_otp_session] = _broken_session

    resp = await client.post("/request-otp", json={"corporateId": "EMP100"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Server error"}

    resp = await client.post("/verify-otp", json={"corporateId": "EMP100", "otp": "1234"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Server error"}
