from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class Activity:
    activity_id: int
    activity_name: str
    date: date
    time: time
    venue: str
    assigned_classes: tuple[str, ...]
    comments: Optional[str] = None
    cc_points: int = 0
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceMark:
    activity_id: int
    student_uid: str
    status: AttendanceStatus
    marked_at: Optional[datetime] = None
    marked_by: Optional[str] = None


@dataclass(frozen=True)
class AttendanceTally:
    present: int = 0
    absent: int = 0
