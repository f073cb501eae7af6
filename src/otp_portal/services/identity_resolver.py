"""Identity resolver — two-step lookup across the user and admin collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from otp_portal.database.repository import IdentityRepository
from otp_portal.models.identity import Admin, IdentityMixin, User

logger = logging.getLogger(__name__)


@dataclass
class ResolvedIdentity:
    """A matched record plus the repository of the collection that owns it."""

    record: IdentityMixin
    repository: IdentityRepository

    @property
    def collection(self) -> str:
        return self.repository.collection


class IdentityResolver:
    """Searches ``User`` first, then ``Admin``.

    If the same corporate ID exists in both collections the user record
    wins; the admin record is never consulted.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._repositories = (
            IdentityRepository(session, User),
            IdentityRepository(session, Admin),
        )

    async def resolve(
        self, corporate_id: str, otp: str | None = None
    ) -> ResolvedIdentity | None:
        """Return the first match for *corporate_id* (and *otp*, if given)."""
        for repo in self._repositories:
            record = await repo.find_one(corporate_id, otp=otp)
            if record is not None:
                logger.debug("Resolved %s in %s", corporate_id, repo.collection)
                return ResolvedIdentity(record=record, repository=repo)
        return None
