"""Disk storage for images attached to alerts."""

from __future__ import annotations

import asyncio
import logging
import os
import random
import re
import time
from dataclasses import dataclass
from pathlib import Path

from wildwatch.errors import UploadRejectedError

logger = logging.getLogger(__name__)

UPLOAD_ROOT_ENV = "WILDWATCH_UPLOAD_ROOT"
PUBLIC_PREFIX = "/uploads"
ALERT_CATEGORY = "alerts"
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_SUFFIX = ".jpg"

_SUFFIX_PATTERN = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def resolve_upload_root(explicit: Path | None = None) -> Path:
    """Return the absolute upload root honoring environment overrides."""

    env_root = os.environ.get(UPLOAD_ROOT_ENV)
    if explicit is not None:
        root_path = explicit
    elif env_root:
        root_path = Path(env_root).expanduser()
    else:
        root_path = Path("uploads")
    return root_path if root_path.is_absolute() else root_path.resolve()


def make_filename(original: str | None) -> str:
    """Build ``{time_ns}-{random}{suffix}``, keeping a sane original suffix."""

    suffix = Path(original or "").suffix
    if not _SUFFIX_PATTERN.match(suffix):
        suffix = DEFAULT_SUFFIX
    return f"{time.time_ns()}-{random.randint(0, 999_999)}{suffix.lower()}"


def public_url(category: str, filename: str) -> str:
    return f"{PUBLIC_PREFIX}/{category}/{filename}"


@dataclass(frozen=True, slots=True)
class StoredMedia:
    """A file written under the upload root."""

    path: Path
    url: str
    size_bytes: int


class MediaIngestor:
    """Validate and persist uploaded images under per-category directories."""

    def __init__(
        self, root: Path | None = None, *, max_bytes: int = MAX_UPLOAD_BYTES
    ) -> None:
        self._root = resolve_upload_root(root)
        self._max_bytes = max_bytes

    @property
    def root(self) -> Path:
        return self._root

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def validate(self, content_type: str | None, size_bytes: int) -> None:
        if not (content_type or "").lower().startswith("image/"):
            raise UploadRejectedError("Only image uploads are allowed", field="photo")
        if size_bytes == 0:
            raise UploadRejectedError("Uploaded file is empty", field="photo")
        if size_bytes > self._max_bytes:
            raise UploadRejectedError(
                f"Photo exceeds the {self._max_bytes // (1024 * 1024)} MiB limit",
                field="photo",
            )

    async def store(
        self,
        category: str,
        data: bytes,
        *,
        filename: str | None,
        content_type: str | None,
    ) -> StoredMedia:
        """Write ``data`` after validation; nothing touches disk on rejection."""

        self.validate(content_type, len(data))

        directory = self._root / category
        directory.mkdir(parents=True, exist_ok=True)
        name = make_filename(filename)
        destination = directory / name
        await asyncio.to_thread(destination.write_bytes, data)
        logger.info("Stored %s upload %s (%d bytes)", category, name, len(data))
        return StoredMedia(
            path=destination, url=public_url(category, name), size_bytes=len(data)
        )

    def discard(self, media: StoredMedia) -> None:
        media.path.unlink(missing_ok=True)


__all__ = [
    "ALERT_CATEGORY",
    "MAX_UPLOAD_BYTES",
    "MediaIngestor",
    "StoredMedia",
    "make_filename",
    "public_url",
    "resolve_upload_root",
]
