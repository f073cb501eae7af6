"""Identity repository — data access layer for one credential collection."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_portal.errors import StorageError
from otp_portal.models.identity import IdentityMixin

logger = logging.getLogger(__name__)


class IdentityRepository:
    """Encapsulates all queries against a single identity collection.

    The same class serves both the ``User`` and ``Admin`` models; the
    model passed in decides which table is read and written.  Every
    ``SQLAlchemyError`` is re-raised as :class:`StorageError`.
    """

    def __init__(self, session: AsyncSession, model: type[IdentityMixin]) -> None:
        self._session = session
        self._model = model

    @property
    def collection(self) -> str:
        """Name of the underlying table."""
        return self._model.__tablename__

    async def find_one(
        self, corporate_id: str, otp: str | None = None
    ) -> IdentityMixin | None:
        """Look up an identity by corporate ID, optionally scoped to *otp*.

        When *otp* is given, only a record whose stored code equals it
        exactly is returned.
        """
        stmt = (
            select(self._model)
            .where(self._model.corporate_id == corporate_id)
            .execution_options(populate_existing=True)
        )
        if otp is not None:
            stmt = stmt.where(self._model.otp == otp)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Lookup in %s failed", self.collection)
            raise StorageError() from exc
        return result.scalar_one_or_none()

    async def set_fields(self, corporate_id: str, **values: Any) -> None:
        """Overwrite *values* on the record and commit."""
        stmt = (
            update(self._model)
            .where(self._model.corporate_id == corporate_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._write(stmt)

    async def unset_fields(self, corporate_id: str, *names: str) -> None:
        """Clear *names* on the record (set them to ``NULL``) and commit."""
        await self.set_fields(corporate_id, **{name: None for name in names})

    async def _write(self, stmt) -> None:
        try:
            await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Write to %s failed", self.collection)
            raise StorageError() from exc
