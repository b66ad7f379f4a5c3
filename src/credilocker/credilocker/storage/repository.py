from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol, Sequence


class FileStorage(Protocol):
    """Bucket-style object store used for student uploads."""

    bucket: str

    def upload(self, path: str, stream: BinaryIO) -> str:
        """Store `stream` under `path`; returns the normalised object path."""

        raise NotImplementedError

    def remove(self, paths: Sequence[str]) -> list[str]:
        raise NotImplementedError

    def public_url(self, path: str) -> str:
        raise NotImplementedError

    def signed_url(self, path: str, expires_in: int) -> str:
        raise NotImplementedError

    def verify_signature(self, path: str, token: str) -> None:
        """Raise StorageError unless `token` is a live signature for `path`."""

        raise NotImplementedError

    def path_from_public_url(self, url: str) -> str:
        raise NotImplementedError

    def local_path(self, path: str) -> Path:
        raise NotImplementedError
