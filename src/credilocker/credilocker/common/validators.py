from __future__ import annotations

import math

from ..core.constants import CLASS_OPTIONS
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_finite(value: float, field_name: str) -> float:
    if value is None or not math.isfinite(value):
        raise ValidationError(f"{field_name} must be a number")
    return value


def require_positive(value: float, field_name: str) -> float:
    require_finite(value, field_name)
    if value <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return value


def require_class(value: str) -> str:
    cls = (value or "").strip()
    if cls not in CLASS_OPTIONS:
        raise ValidationError(f"Invalid class. Allowed: {', '.join(CLASS_OPTIONS)}")
    return cls


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value
