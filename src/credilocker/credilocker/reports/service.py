from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any

from ..cep.repository import CepRepository
from ..cep.service import credits_for_hours, requirement_for_class
from ..cocurricular.repository import ActivityRepository, AttendanceRepository
from ..common.validators import require_class
from ..core.enums import ApprovalStatus, AttendanceStatus
from ..field_projects.repository import FieldProjectRepository
from ..students.repository import StudentRepository


@dataclass(frozen=True)
class ReportTable:
    title: str
    filename: str
    columns: list[str]
    rows: list[list[Any]]


class ReportService:
    """Per-class tables behind the dashboard export buttons."""

    def __init__(
        self,
        students: StudentRepository,
        field_projects: FieldProjectRepository,
        cep: CepRepository,
        activities: ActivityRepository,
        attendance: AttendanceRepository,
    ):
        self._students = students
        self._field_projects = field_projects
        self._cep = cep
        self._activities = activities
        self._attendance = attendance

    def field_project_report(self, class_name: str) -> ReportTable:
        class_name = require_class(class_name)
        names = {s.uid: s.name for s in self._students.list_all()}
        approvals = {a.student_uid: a for a in self._field_projects.list_approvals(class_name=class_name)}
        submitted = sorted({s.student_uid for s in self._field_projects.list_all(class_name=class_name)})

        rows = []
        for uid in submitted:
            approval = approvals.get(uid)
            rows.append(
                [
                    uid,
                    names.get(uid, uid),
                    approval.status.value if approval else ApprovalStatus.PENDING.value,
                    approval.marks if approval else 0,
                    approval.credits if approval else 0,
                ]
            )
        return ReportTable(
            title=f"{class_name} Field Project",
            filename=f"field_project_{class_name}.xlsx",
            columns=["UID", "Name", "Status", "Marks", "Credits"],
            rows=rows,
        )

    def cep_report(self, class_name: str) -> ReportTable:
        class_name = require_class(class_name)
        req = requirement_for_class(self._cep.list_requirements(), class_name)
        tiers = req.credits_config if req else ()

        hours_by_uid: dict[str, float] = {}
        for sub in self._cep.list_submissions():
            hours_by_uid[sub.student_uid] = hours_by_uid.get(sub.student_uid, 0) + sub.hours

        rows = []
        for student in self._students.list_by_class(class_name):
            hours = hours_by_uid.get(student.uid, 0)
            rows.append([student.uid, student.name, hours, credits_for_hours(hours, tiers)])
        return ReportTable(
            title=f"{class_name} CEP",
            filename=f"cep_{class_name}.xlsx",
            columns=["UID", "Name", "Hours Completed", "Credits Allocated"],
            rows=rows,
        )

    def attendance_report(self, class_name: str) -> ReportTable:
        class_name = require_class(class_name)
        activities = sorted(
            (a for a in self._activities.list_all() if class_name in a.assigned_classes),
            key=lambda a: (a.date, a.time),
        )
        marks = {(m.activity_id, m.student_uid): m.status for m in self._attendance.list_marks()}

        name_counts = Counter(a.activity_name for a in activities)
        activity_columns = [
            a.activity_name if name_counts[a.activity_name] == 1 else f"{a.activity_name} ({a.date:%Y-%m-%d})"
            for a in activities
        ]

        rows = []
        for student in self._students.list_by_class(class_name):
            total_points = 0
            row: list[Any] = [student.uid, student.name]
            for activity in activities:
                status = marks.get((activity.activity_id, student.uid))
                if status == AttendanceStatus.PRESENT:
                    row.append("Present")
                    total_points += activity.cc_points
                elif status == AttendanceStatus.ABSENT:
                    row.append("Absent")
                else:
                    row.append("-")
            row.append(total_points)
            rows.append(row)

        return ReportTable(
            title=f"{class_name} Attendance",
            filename=f"attendance_{class_name}.xlsx",
            columns=["uid", "name", *activity_columns, "Total CC Points"],
            rows=rows,
        )
