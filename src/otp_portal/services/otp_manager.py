"""OTP lifecycle manager — issues, delivers and verifies one-time passwords.

States per identity
-------------------
* ``NO_CHALLENGE``      — ``otp`` / ``otp_expiry`` are both unset.
* ``CHALLENGE_PENDING`` — a code is stored and its expiry is in the future.
* ``CHALLENGE_EXPIRED`` — a code is stored but its expiry has passed.  This
  state is derived from the clock, never stored.

Concurrent issues for the same corporate ID are last-write-wins, and the
verify-then-clear sequence is not atomic: two simultaneous verifies with
the same code may both succeed.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from otp_portal.config import settings
from otp_portal.errors import Expired, IdentityNotFound, InvalidCode
from otp_portal.models.identity import IdentityMixin
from otp_portal.services.email_service import EmailService
from otp_portal.services.identity_resolver import IdentityResolver
from otp_portal.services.otp_generator import generate_otp

logger = logging.getLogger(__name__)


class ChallengeState(enum.Enum):
    NO_CHALLENGE = "no_challenge"
    CHALLENGE_PENDING = "challenge_pending"
    CHALLENGE_EXPIRED = "challenge_expired"


@dataclass
class Challenge:
    """The code and expiry written by an issue."""

    corporate_id: str
    otp: str
    expires_at: datetime
    collection: str


@dataclass
class VerificationResult:
    corporate_id: str
    role: str | None = None


def utc_now() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def challenge_state(record: IdentityMixin, now: datetime) -> ChallengeState:
    """Derive the challenge state of *record* at *now*."""
    if record.otp is None or record.otp_expiry is None:
        return ChallengeState.NO_CHALLENGE
    if _as_utc(record.otp_expiry) < now:
        return ChallengeState.CHALLENGE_EXPIRED
    return ChallengeState.CHALLENGE_PENDING


class OTPLifecycleManager:
    """Orchestrates identity lookup, code generation, storage and delivery.

    Parameters
    ----------
    session:
        An active session on the OTP database.
    email_service:
        Shared mail sender; created once per process.
    ttl_seconds:
        Validity window of an issued code.
    return_role:
        Whether a successful verify reports the identity's role.
    clock / generator:
        Sources of the current time and of new codes.
    """

    def __init__(
        self,
        session: AsyncSession,
        email_service: EmailService,
        *,
        ttl_seconds: int | None = None,
        return_role: bool | None = None,
        clock: Callable[[], datetime] = utc_now,
        generator: Callable[[], str] = generate_otp,
    ) -> None:
        self._resolver = IdentityResolver(session)
        self._email = email_service
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.otp_ttl_seconds
        self._return_role = (
            return_role if return_role is not None else settings.return_role_on_verify
        )
        self._clock = clock
        self._generate = generator

    async def request_otp(self, corporate_id: str) -> Challenge:
        """Issue a fresh code, overwriting any pending one, and email it.

        The code is committed before delivery is attempted, so a
        :class:`DeliveryError` leaves it in place.
        """
        identity = await self._resolver.resolve(corporate_id)
        if identity is None:
            logger.info("OTP requested for unknown corporate ID %s", corporate_id)
            raise IdentityNotFound()

        otp = self._generate()
        expires_at = self._clock() + timedelta(seconds=self._ttl)
        await identity.repository.set_fields(
            corporate_id, otp=otp, otp_expiry=expires_at
        )
        logger.info(
            "OTP issued for %s in %s, expires %s",
            corporate_id,
            identity.collection,
            expires_at.isoformat(),
        )

        await self._email.send_otp(identity.record.email, otp, self._ttl)
        return Challenge(
            corporate_id=corporate_id,
            otp=otp,
            expires_at=expires_at,
            collection=identity.collection,
        )

    async def resend_otp(self, corporate_id: str) -> Challenge:
        """Same as :meth:`request_otp`; the previous code is replaced."""
        return await self.request_otp(corporate_id)

    async def verify_otp(self, corporate_id: str, otp: str) -> VerificationResult:
        """Check *otp* for *corporate_id* and consume it on success.

        An expired code is left stored so later attempts keep failing
        with :class:`Expired` until a new code is issued.
        """
        identity = await self._resolver.resolve(corporate_id, otp=otp)
        if identity is None:
            logger.info("Invalid OTP for %s", corporate_id)
            raise InvalidCode()

        state = challenge_state(identity.record, self._clock())
        if state is not ChallengeState.CHALLENGE_PENDING:
            logger.info("Expired OTP for %s", corporate_id)
            raise Expired()

        await identity.repository.unset_fields(corporate_id, "otp", "otp_expiry")
        logger.info("OTP verified for %s in %s", corporate_id, identity.collection)

        role = identity.record.role if self._return_role else None
        return VerificationResult(corporate_id=corporate_id, role=role)
