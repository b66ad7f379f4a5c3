from __future__ import annotations

from datetime import date, datetime, time

from src.credilocker.credilocker.cep.model import CepSubmission, CreditTier, Requirement
from src.credilocker.credilocker.cocurricular.model import Activity, AttendanceMark
from src.credilocker.credilocker.core.enums import AttendanceStatus, DocumentType
from src.credilocker.credilocker.dashboard.service import DashboardService, daily_counts
from src.credilocker.credilocker.field_projects.model import Submission
from tests.fakes import FakeActivityRepo, FakeAttendanceRepo, FakeCepRepo, FakeFieldProjectRepo, student_user

TODAY = date(2026, 3, 10)


def _fp(sid, uid, doc_type, at):
    return Submission(
        submission_id=sid, student_uid=uid, class_name="FYIT", document_type=doc_type, file_url="u", uploaded_at=at
    )


def _cep(sid, uid, hours, at):
    return CepSubmission(
        submission_id=sid,
        student_uid=uid,
        activity_name="Cleanup",
        hours=hours,
        activity_date=at.date(),
        location="Park",
        certificate_url="c",
        picture_url="p",
        submitted_at=at,
    )


def _activity(aid, day, classes=("FYIT",)):
    return Activity(
        activity_id=aid,
        activity_name=f"A{aid}",
        date=day,
        time=time(10, 0),
        venue="Hall",
        assigned_classes=tuple(classes),
        cc_points=2,
    )


def _service():
    fp = FakeFieldProjectRepo(
        [_fp(i + 1, "24BIT001", t, datetime(2026, 3, 10, 9, i)) for i, t in enumerate(DocumentType)]
        + [_fp(i + 10, "24BIT002", t, datetime(2026, 3, 8, 9, i)) for i, t in enumerate(DocumentType)]
        + [_fp(20, "24BIT003", DocumentType.OUTCOME_FORM, datetime(2026, 3, 9, 9, 0))]
        + [_fp(21, "24BIT001", DocumentType.OUTCOME_FORM, datetime(2026, 3, 10, 10, 0))]
    )
    cep = FakeCepRepo(
        [
            Requirement(
                requirement_id=1,
                assigned_class="FYIT",
                minimum_hours=40,
                deadline=date(2026, 4, 30),
                credits_config=(CreditTier(30, 1),),
            )
        ],
        [
            _cep(1, "24BIT001", 10, datetime(2026, 3, 10, 8, 0)),
            _cep(2, "24BIT001", 6, datetime(2026, 3, 4, 8, 0)),
            _cep(3, "24BIT002", 4, datetime(2026, 3, 9, 8, 0)),
            _cep(4, "24BIT002", 4, datetime(2026, 3, 1, 8, 0)),
        ],
    )
    activities = FakeActivityRepo(
        [
            _activity(1, date(2026, 3, 1)),
            _activity(2, date(2026, 3, 12)),
            _activity(3, date(2026, 3, 15), classes=("SYSD",)),
            _activity(4, date(2026, 3, 10)),
            _activity(5, date(2026, 3, 20)),
        ]
    )
    attendance = FakeAttendanceRepo(
        [
            AttendanceMark(1, "24BIT001", AttendanceStatus.PRESENT, marked_at=datetime(2026, 3, 1, 12, 0)),
            AttendanceMark(1, "24BIT002", AttendanceStatus.ABSENT, marked_at=datetime(2026, 3, 1, 12, 0)),
            AttendanceMark(4, "24BIT001", AttendanceStatus.ABSENT, marked_at=datetime(2026, 3, 10, 12, 0)),
            AttendanceMark(5, "24BIT001", AttendanceStatus.PRESENT, marked_at=datetime(2026, 3, 10, 13, 0)),
        ]
    )
    return DashboardService(fp, cep, activities, attendance)


def test_daily_counts_cover_last_seven_days_oldest_first():
    counts = daily_counts(
        [datetime(2026, 3, 10, 8), datetime(2026, 3, 10, 9), datetime(2026, 3, 4, 8), datetime(2026, 3, 3, 8)],
        today=TODAY,
    )

    assert [c.label for c in counts] == ["03-04", "03-05", "03-06", "03-07", "03-08", "03-09", "03-10"]
    assert [c.count for c in counts] == [1, 0, 0, 0, 0, 0, 2]


def test_student_dashboard():
    data = _service().for_student(student_user(), today=TODAY)

    assert data.field_counts[DocumentType.OUTCOME_FORM] == 2
    assert data.field_counts[DocumentType.VIDEO_PRESENTATION] == 1
    assert data.upcoming_activities == 3
    assert (data.attendance.present, data.attendance.absent) == (2, 1)
    assert data.cep_hours == 16
    assert data.cep_progress == 40


def test_student_dashboard_without_requirement():
    data = _service().for_student(student_user(uid="23BSD001", class_name="SYSD"), today=TODAY)

    assert data.cep_requirement is None
    assert data.cep_progress == 0
    assert data.upcoming_activities == 1


def test_teacher_dashboard():
    data = _service().for_teacher(today=TODAY)

    assert data.students_with_all_docs == 2
    assert data.students_with_all_docs_today == 1
    assert data.field_project_incomplete == 1
    assert data.cep_unique_students == 2
    assert data.cep_unique_students_today == 1
    assert [c.count for c in data.cep_daily] == [1, 0, 0, 0, 0, 1, 1]
    assert data.attendance_marked_today == 2
    assert [a.activity_id for a in data.activity_options] == [5, 3, 2, 4, 1]
    assert [a.activity_id for a in data.upcoming_activities] == [4, 2, 3]
    assert data.selected_activity_id == 5
    assert (data.selected_tally.present, data.selected_tally.absent) == (1, 0)


def test_teacher_dashboard_selected_activity():
    data = _service().for_teacher(selected_activity_id=1, today=TODAY)

    assert (data.selected_tally.present, data.selected_tally.absent) == (1, 1)
