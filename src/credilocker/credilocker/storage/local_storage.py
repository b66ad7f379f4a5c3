from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Sequence
from urllib.parse import quote, unquote, urlparse

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_BUCKET
from ..core.exceptions import StorageError
from .paths import PUBLIC_PREFIX, SIGN_PREFIX, clean_href, normalize_object_path
from .repository import FileStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Bucket kept on the local filesystem under `<root>/<bucket>/`.

    Public URLs mirror the hosted object-store layout so stored rows stay
    portable; downloads go through short-lived signed URLs.
    """

    def __init__(self, root: str | Path, *, secret_key: str, bucket: str = DEFAULT_BUCKET):
        self.bucket = bucket
        self._base = Path(root).resolve() / bucket
        self._serializer = URLSafeTimedSerializer(secret_key, salt=f"storage:{bucket}")

    def local_path(self, path: str) -> Path:
        target = (self._base / normalize_object_path(path)).resolve()
        if self._base not in target.parents:
            raise StorageError("Invalid storage path")
        return target

    def upload(self, path: str, stream: BinaryIO) -> str:
        path = normalize_object_path(path)
        target = self.local_path(path)
        if target.exists():
            raise StorageError("The resource already exists")

        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with target.open("xb") as fh:
                shutil.copyfileobj(stream, fh)
        except OSError as e:
            raise StorageError(f"Upload failed: {e}") from e

        logger.info("Stored %s/%s", self.bucket, path)
        return path

    def remove(self, paths: Sequence[str]) -> list[str]:
        removed = []
        for path in paths:
            target = self.local_path(path)
            if target.is_file():
                target.unlink()
                removed.append(normalize_object_path(path))
        return removed

    def public_url(self, path: str) -> str:
        return f"{PUBLIC_PREFIX}{self.bucket}/{quote(normalize_object_path(path))}"

    def signed_url(self, path: str, expires_in: int) -> str:
        path = normalize_object_path(path)
        token = self._serializer.dumps({"path": path, "ttl": int(expires_in)})
        return f"{SIGN_PREFIX}{self.bucket}/{quote(path)}?token={token}"

    def verify_signature(self, path: str, token: str) -> None:
        path = normalize_object_path(path)
        try:
            payload = self._serializer.loads(token)
            self._serializer.loads(token, max_age=int(payload.get("ttl", 0)))
        except SignatureExpired as e:
            raise StorageError("Signed URL has expired") from e
        except BadSignature as e:
            raise StorageError("Invalid signed URL") from e

        if payload.get("path") != path:
            raise StorageError("Invalid signed URL")

    def path_from_public_url(self, url: str) -> str:
        clean = clean_href(url)
        if not clean:
            return ""
        pathname = urlparse(clean).path
        idx = pathname.find(PUBLIC_PREFIX)
        if idx == -1:
            return ""
        remainder = pathname[idx + len(PUBLIC_PREFIX):]
        bucket_prefix = f"{self.bucket}/"
        if not remainder.startswith(bucket_prefix):
            return ""
        try:
            return normalize_object_path(unquote(remainder[len(bucket_prefix):]))
        except StorageError:
            return ""
