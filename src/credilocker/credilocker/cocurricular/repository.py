from __future__ import annotations

from datetime import date, datetime, time
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import Activity, AttendanceMark


class ActivityRepository(Protocol):
    def list_all(self) -> Sequence[Activity]:
        """Most recently created first."""

        raise NotImplementedError

    def list_from(self, start: date, *, limit: Optional[int] = None) -> Sequence[Activity]:
        """Activities on or after `start`, soonest first."""

        raise NotImplementedError

    def get(self, activity_id: int) -> Optional[Activity]:
        raise NotImplementedError

    def create(
        self,
        *,
        activity_name: str,
        date: date,
        time: time,
        venue: str,
        assigned_classes: Sequence[str],
        comments: Optional[str],
        cc_points: int,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        activity_id: int,
        *,
        activity_name: str,
        date: date,
        time: time,
        venue: str,
        assigned_classes: Sequence[str],
        comments: Optional[str],
        cc_points: int,
    ) -> bool:
        raise NotImplementedError

    def delete(self, activity_id: int) -> bool:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def list_marks(
        self,
        *,
        activity_id: Optional[int] = None,
        student_uid: Optional[str] = None,
    ) -> Sequence[AttendanceMark]:
        raise NotImplementedError

    def upsert_marks(
        self,
        *,
        activity_id: int,
        marks: Mapping[str, AttendanceStatus],
        marked_by: str,
        marked_at: datetime,
    ) -> int:
        """One row per (activity, student); returns rows written."""

        raise NotImplementedError
