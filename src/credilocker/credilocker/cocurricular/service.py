from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import CLASS_OPTIONS
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from .model import Activity, AttendanceTally
from .repository import ActivityRepository, AttendanceRepository

logger = logging.getLogger(__name__)


def tally(statuses: Iterable[AttendanceStatus | str]) -> AttendanceTally:
    present = absent = 0
    for status in statuses:
        status = AttendanceStatus(status)
        if status == AttendanceStatus.PRESENT:
            present += 1
        elif status == AttendanceStatus.ABSENT:
            absent += 1
    return AttendanceTally(present=present, absent=absent)


def visible_to_class(activities: Sequence[Activity], class_name: Optional[str]) -> list[Activity]:
    if not class_name:
        return []
    return [a for a in activities if class_name in a.assigned_classes]


@dataclass(frozen=True)
class RosterEntry:
    student: Student
    status: Optional[AttendanceStatus]


class CoCurricularService:
    def __init__(self, activities: ActivityRepository, attendance: AttendanceRepository, students: StudentRepository):
        self._activities = activities
        self._attendance = attendance
        self._students = students

    @staticmethod
    def _require_teacher(user: SessionUser) -> None:
        if user.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can manage co-curricular activities")

    def list_for_user(self, user: SessionUser) -> list[Activity]:
        activities = list(self._activities.list_all())
        if user.role == Role.TEACHER:
            return activities
        return visible_to_class(activities, user.class_name)

    def get(self, activity_id: int) -> Activity:
        activity = self._activities.get(int(activity_id))
        if not activity:
            raise NotFoundError("Activity not found")
        return activity

    def save_activity(
        self,
        user: SessionUser,
        *,
        activity_name: str,
        activity_date: Optional[date],
        activity_time: Optional[time],
        venue: str,
        classes: Sequence[str],
        comments: Optional[str] = None,
        cc_points: int = 0,
        activity_id: Optional[int] = None,
    ) -> int:
        self._require_teacher(user)
        activity_name = require_non_empty(activity_name, "Activity name")
        venue = require_non_empty(venue, "Venue")
        if activity_date is None or activity_time is None:
            raise ValidationError("Date and time are required")

        # Keep the checkbox order stable regardless of submission order.
        chosen = [c for c in CLASS_OPTIONS if c in set(classes or ())]
        unknown = set(classes or ()) - set(CLASS_OPTIONS)
        if unknown:
            raise ValidationError(f"Invalid class. Allowed: {', '.join(CLASS_OPTIONS)}")
        if not chosen:
            raise ValidationError("Select at least one class")
        if int(cc_points) < 0:
            raise ValidationError("CC points cannot be negative")

        fields = dict(
            activity_name=activity_name,
            date=activity_date,
            time=activity_time,
            venue=venue,
            assigned_classes=chosen,
            comments=(comments or "").strip() or None,
            cc_points=int(cc_points),
        )
        if activity_id:
            if not self._activities.update(int(activity_id), **fields):
                raise NotFoundError("Activity not found")
            return int(activity_id)
        return self._activities.create(**fields)

    def delete_activity(self, user: SessionUser, activity_id: int) -> None:
        self._require_teacher(user)
        if not self._activities.delete(int(activity_id)):
            raise NotFoundError("Activity not found")

    def roster(self, activity_id: int) -> tuple[Activity, list[RosterEntry]]:
        """Students of the activity's classes with their current mark (None when unmarked)."""

        activity = self.get(activity_id)
        students = self._students.list_by_classes(list(activity.assigned_classes))
        marks = {m.student_uid: m.status for m in self._attendance.list_marks(activity_id=activity.activity_id)}
        return activity, [RosterEntry(student=s, status=marks.get(s.uid)) for s in students]

    def mark_attendance(
        self,
        user: SessionUser,
        *,
        activity_id: int,
        marks: Mapping[str, str],
        now: datetime | None = None,
    ) -> int:
        self._require_teacher(user)
        activity, entries = self.roster(activity_id)
        rostered = {e.student.uid for e in entries}

        parsed: dict[str, AttendanceStatus] = {}
        for uid, status in marks.items():
            if not status:
                continue
            if uid not in rostered:
                raise ValidationError(f"Student {uid} is not assigned to this activity")
            try:
                parsed[uid] = AttendanceStatus(status)
            except ValueError:
                raise ValidationError(f"Invalid attendance status '{status}'")

        written = self._attendance.upsert_marks(
            activity_id=activity.activity_id,
            marks=parsed,
            marked_by=user.user_id,
            marked_at=now or now_local(),
        )
        logger.info("Marked %d attendance rows for activity %s", written, activity.activity_id)
        return written

    def student_tally(self, student_uid: str) -> AttendanceTally:
        return tally(m.status for m in self._attendance.list_marks(student_uid=student_uid))

    def activity_tally(self, activity_id: int) -> AttendanceTally:
        return tally(m.status for m in self._attendance.list_marks(activity_id=int(activity_id)))
