from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_SIGNED_URL_SECONDS
from ..core.exceptions import StorageError
from .paths import build_object_path, clean_href, preview_kind
from .repository import FileStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preview:
    title: str
    url: str
    kind: str


class UploadService:
    """Upload/remove/preview helpers shared by the field-project and CEP screens."""

    def __init__(self, storage: FileStorage, *, signed_url_ttl: int = DEFAULT_SIGNED_URL_SECONDS):
        self._storage = storage
        self._ttl = int(signed_url_ttl)

    def upload(self, *, folder: str, owner: str, filename: str, stream: BinaryIO, now: datetime | None = None) -> str:
        """Store a file and return its public URL."""
        path = build_object_path(folder, owner, filename, now=now or now_local())
        stored = self._storage.upload(path, stream)
        return self._storage.public_url(stored)

    def remove_quietly(self, url: str) -> None:
        """Best-effort cleanup after the owning row is gone."""
        path = self._storage.path_from_public_url(url)
        if not path:
            logger.warning("Skipping storage cleanup for unrecognised URL %r", url)
            return
        try:
            self._storage.remove([path])
        except (StorageError, OSError):
            logger.warning("Storage cleanup failed for %s", path, exc_info=True)

    def resolve(self, url: str) -> str:
        """Signed URL when the object lives in our bucket, else the cleaned href."""
        path = self._storage.path_from_public_url(url)
        if not path:
            return clean_href(url)
        try:
            return self._storage.signed_url(path, self._ttl)
        except StorageError:
            logger.warning("Could not sign %s; falling back to public URL", path, exc_info=True)
            return clean_href(url)

    def preview(self, title: str, url: str) -> Preview:
        resolved = self.resolve(url)
        return Preview(title=title, url=resolved, kind=preview_kind(resolved))
