from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..cep.model import CepSubmission, Requirement
from ..cep.repository import CepRepository
from ..cep.service import progress_percent, requirement_for_class, total_hours
from ..cocurricular.model import Activity, AttendanceTally
from ..cocurricular.repository import ActivityRepository, AttendanceRepository
from ..cocurricular.service import tally
from ..common.datetime_utils import now_local, same_day
from ..core.constants import DASHBOARD_TREND_DAYS, UPCOMING_ACTIVITIES_LIMIT
from ..core.enums import DocumentType
from ..field_projects.repository import FieldProjectRepository
from ..field_projects.service import completion_stats
from ..users.model import SessionUser


@dataclass(frozen=True)
class DailyCount:
    label: str
    count: int


@dataclass(frozen=True)
class StudentDashboard:
    field_counts: dict[DocumentType, int]
    upcoming_activities: int
    attendance: AttendanceTally
    cep_requirement: Optional[Requirement]
    cep_hours: float
    cep_progress: float


@dataclass(frozen=True)
class TeacherDashboard:
    students_with_all_docs: int
    students_with_all_docs_today: int
    field_project_incomplete: int
    cep_unique_students: int
    cep_unique_students_today: int
    cep_daily: list[DailyCount]
    attendance_marked_today: int
    activity_options: list[Activity]
    upcoming_activities: list[Activity]
    selected_activity_id: Optional[int]
    selected_tally: AttendanceTally = field(default_factory=AttendanceTally)


def latest_by_student(submissions: Sequence[CepSubmission]) -> dict[str, datetime]:
    latest: dict[str, datetime] = {}
    for sub in submissions:
        if sub.student_uid not in latest or sub.submitted_at > latest[sub.student_uid]:
            latest[sub.student_uid] = sub.submitted_at
    return latest


def daily_counts(timestamps: Sequence[datetime], *, today: date, days: int = DASHBOARD_TREND_DAYS) -> list[DailyCount]:
    """Counts per day for the last `days` days, oldest first, labelled MM-DD."""

    window = [today - timedelta(days=days - 1 - i) for i in range(days)]
    buckets = {d: 0 for d in window}
    for ts in timestamps:
        if ts is not None and ts.date() in buckets:
            buckets[ts.date()] += 1
    return [DailyCount(label=d.strftime("%m-%d"), count=buckets[d]) for d in window]


class DashboardService:
    def __init__(
        self,
        field_projects: FieldProjectRepository,
        cep: CepRepository,
        activities: ActivityRepository,
        attendance: AttendanceRepository,
    ):
        self._field_projects = field_projects
        self._cep = cep
        self._activities = activities
        self._attendance = attendance

    def for_student(self, user: SessionUser, *, today: date | None = None) -> StudentDashboard:
        today = today or now_local().date()

        counts = {t: 0 for t in DocumentType}
        for sub in self._field_projects.list_for_student(user.user_id):
            counts[sub.document_type] += 1

        upcoming = [a for a in self._activities.list_from(today) if user.class_name in a.assigned_classes]
        attendance = tally(m.status for m in self._attendance.list_marks(student_uid=user.user_id))

        req = requirement_for_class(self._cep.list_requirements(), user.class_name)
        hours = total_hours(self._cep.list_submissions(student_uid=user.user_id)) if req else 0.0

        return StudentDashboard(
            field_counts=counts,
            upcoming_activities=len(upcoming),
            attendance=attendance,
            cep_requirement=req,
            cep_hours=hours,
            cep_progress=progress_percent(hours, req.minimum_hours) if req else 0.0,
        )

    def for_teacher(self, *, selected_activity_id: Optional[int] = None, today: date | None = None) -> TeacherDashboard:
        today = today or now_local().date()

        fp = completion_stats(self._field_projects.list_all(), today=today)

        cep_subs = self._cep.list_submissions()
        latest = latest_by_student(cep_subs)

        marks = self._attendance.list_marks()
        marked_today = sum(1 for m in marks if same_day(m.marked_at, today))

        options = sorted(self._activities.list_all(), key=lambda a: (a.date, a.time), reverse=True)
        if selected_activity_id is None and options:
            selected_activity_id = options[0].activity_id

        selected = AttendanceTally()
        if selected_activity_id is not None:
            selected = tally(m.status for m in marks if m.activity_id == int(selected_activity_id))

        return TeacherDashboard(
            students_with_all_docs=fp.complete,
            students_with_all_docs_today=fp.complete_today,
            field_project_incomplete=max(0, fp.started - fp.complete),
            cep_unique_students=len(latest),
            cep_unique_students_today=sum(1 for ts in latest.values() if same_day(ts, today)),
            cep_daily=daily_counts([s.submitted_at for s in cep_subs], today=today),
            attendance_marked_today=marked_today,
            activity_options=options,
            upcoming_activities=list(self._activities.list_from(today, limit=UPCOMING_ACTIVITIES_LIMIT)),
            selected_activity_id=selected_activity_id,
            selected_tally=selected,
        )
