"""Attachment store — writes uploaded idea attachments to local disk."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from fastapi import UploadFile

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def stored_filename(employee_id: str, original_name: str) -> str:
    """Build the on-disk name: ``{employee_id}_{name}``, whitespace → ``_``.

    Directory components of either part are dropped so the file always
    lands directly inside the upload directory.
    """
    name = _WHITESPACE.sub("_", Path(original_name).name)
    prefix = Path(employee_id).name
    return f"{prefix}_{name}"


class AttachmentStore:
    """Saves uploads under a single directory."""

    def __init__(self, upload_dir: str | Path) -> None:
        self._root = Path(upload_dir)

    @property
    def root(self) -> Path:
        return self._root

    async def save(self, employee_id: str, upload: UploadFile) -> str:
        """Persist *upload* and return the stored filename."""
        filename = stored_filename(employee_id, upload.filename or "attachment")
        self._root.mkdir(parents=True, exist_ok=True)
        content = await upload.read()
        (self._root / filename).write_bytes(content)
        logger.info("Stored attachment %s (%d bytes)", filename, len(content))
        return filename
