from __future__ import annotations

import posixpath
import re
from datetime import datetime
from urllib.parse import urlparse

from werkzeug.utils import secure_filename

from ..core.exceptions import StorageError

PUBLIC_PREFIX = "/storage/v1/object/public/"
SIGN_PREFIX = "/storage/v1/object/sign/"

_IMAGE_RE = re.compile(r"\.(png|jpg|jpeg|gif|webp)$", re.IGNORECASE)
_VIDEO_RE = re.compile(r"\.(mp4|webm|ogg)$", re.IGNORECASE)


def clean_href(raw_url: str | None) -> str:
    """Trim whitespace and stray leading '@' characters pasted into stored URLs."""
    if not raw_url:
        return ""
    return raw_url.strip().lstrip("@")


def normalize_object_path(path: str) -> str:
    path = (path or "").replace("\\", "/").strip()
    if not path or path.startswith("/"):
        raise StorageError("Invalid storage path")
    parts = [p for p in path.split("/") if p not in ("", ".")]
    if not parts or any(p == ".." for p in parts):
        raise StorageError("Invalid storage path")
    return posixpath.join(*parts)


def build_object_path(folder: str, owner: str, filename: str, *, now: datetime) -> str:
    """`<folder>/<owner>_<epoch millis>_<sanitised filename>`."""
    safe_name = secure_filename(filename or "") or "upload"
    millis = int(now.timestamp() * 1000)
    return normalize_object_path(f"{folder}/{owner}_{millis}_{safe_name}")


def preview_kind(url: str) -> str:
    path = urlparse(clean_href(url)).path
    if _IMAGE_RE.search(path):
        return "image"
    if _VIDEO_RE.search(path):
        return "video"
    return "document"
