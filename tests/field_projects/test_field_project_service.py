from __future__ import annotations

import io
from datetime import date, datetime

import pytest

from src.credilocker.credilocker.core.enums import ApprovalStatus, DocumentType
from src.credilocker.credilocker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.credilocker.credilocker.field_projects.model import Submission
from src.credilocker.credilocker.field_projects.service import (
    FieldProjectService,
    SubmissionFilters,
    completion_stats,
    filter_submissions,
    group_submissions,
    is_complete,
)
from src.credilocker.credilocker.students.model import Student
from tests.fakes import TEACHER, FakeFieldProjectRepo, FakeStudentsRepo, FakeUploads, student_user

STUDENTS = [
    Student(uid="24BIT001", name="Asha Patel", email="a@x.edu", class_name="FYIT"),
    Student(uid="24BIT002", name="Ravi Kumar", email="r@x.edu", class_name="FYIT"),
]


def _sub(sid, uid, doc_type, *, class_name="FYIT", at=datetime(2026, 3, 1, 9, 0)):
    return Submission(
        submission_id=sid,
        student_uid=uid,
        class_name=class_name,
        document_type=doc_type,
        file_url=f"/storage/v1/object/public/student-submissions/field_project/{doc_type.value}/{uid}_{sid}.pdf",
        uploaded_at=at,
    )


def _full_set(uid, start_id, at):
    return [_sub(start_id + i, uid, t, at=at) for i, t in enumerate(DocumentType)]


def test_is_complete_needs_exactly_the_four_types():
    assert is_complete(list(DocumentType))
    assert is_complete(list(DocumentType) + [DocumentType.OUTCOME_FORM])
    assert not is_complete([DocumentType.OUTCOME_FORM, DocumentType.FEEDBACK_FORM])
    assert not is_complete([])


def test_filters_use_submission_class_and_case_insensitive_text():
    subs = [_sub(1, "24BIT001", DocumentType.OUTCOME_FORM), _sub(2, "24BIT002", DocumentType.OUTCOME_FORM, class_name="SYIT")]

    assert [s.submission_id for s in filter_submissions(subs, STUDENTS, SubmissionFilters(class_name="SYIT"))] == [2]
    assert [s.submission_id for s in filter_submissions(subs, STUDENTS, SubmissionFilters(uid="bit001"))] == [1]
    assert [s.submission_id for s in filter_submissions(subs, STUDENTS, SubmissionFilters(name="RAVI"))] == [2]


def test_grouping_is_by_student_and_class_in_first_seen_order():
    subs = [
        _sub(1, "24BIT002", DocumentType.OUTCOME_FORM),
        _sub(2, "24BIT001", DocumentType.OUTCOME_FORM),
        _sub(3, "24BIT002", DocumentType.FEEDBACK_FORM),
        _sub(4, "24BIT002", DocumentType.FEEDBACK_FORM, class_name="SYIT"),
        _sub(5, "99XX", DocumentType.FEEDBACK_FORM),
    ]

    groups = group_submissions(subs, STUDENTS)

    assert [(g.student_uid, g.class_name, len(g.submissions)) for g in groups] == [
        ("24BIT002", "FYIT", 2),
        ("24BIT001", "FYIT", 1),
        ("24BIT002", "SYIT", 1),
        ("99XX", "FYIT", 1),
    ]
    assert groups[0].student_name == "Ravi Kumar"
    assert groups[3].student_name == "99XX"


def test_completion_stats_counts_today_by_latest_upload():
    today = date(2026, 3, 2)
    subs = (
        _full_set("24BIT001", 1, datetime(2026, 3, 2, 10, 0))
        + _full_set("24BIT002", 10, datetime(2026, 3, 1, 10, 0))
        + [_sub(20, "24BIT003", DocumentType.OUTCOME_FORM, at=datetime(2026, 3, 2, 8, 0))]
    )

    stats = completion_stats(subs, today=today)

    assert (stats.complete, stats.complete_today, stats.started) == (2, 1, 3)


def _service(submissions=()):
    repo = FakeFieldProjectRepo(submissions)
    uploads = FakeUploads()
    return FieldProjectService(repo, FakeStudentsRepo(STUDENTS), uploads), repo, uploads


def test_student_upload_creates_row_under_type_folder():
    svc, repo, uploads = _service()

    sid = svc.upload(
        student_user(), document_type="completion_letter", filename="letter.pdf", stream=io.BytesIO(b"x")
    )

    sub = repo.get(sid)
    assert sub.document_type == DocumentType.COMPLETION_LETTER
    assert sub.class_name == "FYIT"
    assert "/field_project/completion_letter/24BIT001_" in uploads.uploaded[0]


def test_upload_rules():
    svc, _, _ = _service([_sub(1, "24BIT001", DocumentType.OUTCOME_FORM)])

    with pytest.raises(AuthorizationError):
        svc.upload(TEACHER, document_type="outcome_form", filename="a.pdf", stream=io.BytesIO(b""))
    with pytest.raises(ValidationError, match="Unknown document type"):
        svc.upload(student_user(), document_type="essay", filename="a.pdf", stream=io.BytesIO(b""))
    with pytest.raises(ValidationError, match="choose a file"):
        svc.upload(student_user(), document_type="feedback_form", filename="", stream=None)
    with pytest.raises(ValidationError, match="already uploaded"):
        svc.upload(student_user(), document_type="outcome_form", filename="a.pdf", stream=io.BytesIO(b""))


class _FailingInsertRepo(FakeFieldProjectRepo):
    def create(self, **kwargs):
        raise RuntimeError("insert failed")


def test_failed_insert_removes_uploaded_file():
    uploads = FakeUploads()
    svc = FieldProjectService(_FailingInsertRepo(), FakeStudentsRepo(STUDENTS), uploads)

    with pytest.raises(RuntimeError):
        svc.upload(student_user(), document_type="outcome_form", filename="o.pdf", stream=io.BytesIO(b"x"))

    assert len(uploads.uploaded) == 1
    assert uploads.removed == uploads.uploaded

def test_for_student_keeps_latest_per_type():
    svc, _, _ = _service(
        [
            _sub(1, "24BIT001", DocumentType.OUTCOME_FORM, at=datetime(2026, 3, 1, 9, 0)),
            _sub(2, "24BIT001", DocumentType.OUTCOME_FORM, at=datetime(2026, 3, 1, 11, 0)),
        ]
    )

    docs = svc.for_student("24BIT001")

    assert docs[DocumentType.OUTCOME_FORM].submission_id == 2
    assert docs[DocumentType.VIDEO_PRESENTATION] is None


def test_student_can_delete_only_own_submission():
    svc, repo, uploads = _service([_sub(1, "24BIT001", DocumentType.OUTCOME_FORM), _sub(2, "24BIT002", DocumentType.OUTCOME_FORM)])

    with pytest.raises(AuthorizationError):
        svc.delete_submission(student_user(), 2)

    svc.delete_submission(student_user(), 1)
    assert repo.get(1) is None
    assert len(uploads.removed) == 1


def test_teacher_can_delete_any_and_missing_rows_raise():
    svc, repo, _ = _service([_sub(2, "24BIT002", DocumentType.OUTCOME_FORM)])

    svc.delete_submission(TEACHER, 2)
    assert repo.get(2) is None

    with pytest.raises(NotFoundError):
        svc.delete_submission(TEACHER, 2)


def test_teacher_view_attaches_approvals():
    svc, _, _ = _service(_full_set("24BIT001", 1, datetime(2026, 3, 1, 9, 0)))
    svc.set_approval(TEACHER, student_uid="24BIT001", class_name="FYIT", status="Approved", marks=18, credits=2)

    groups = svc.teacher_view(SubmissionFilters())

    assert len(groups) == 1
    assert groups[0].approval.status == ApprovalStatus.APPROVED
    assert groups[0].approval.decided_by == "T001"
    assert is_complete(groups[0].document_types)


def test_set_approval_validation():
    svc, _, _ = _service()

    with pytest.raises(AuthorizationError):
        svc.set_approval(student_user(), student_uid="24BIT001", class_name="FYIT", status="Approved")
    with pytest.raises(ValidationError, match="Unknown approval status"):
        svc.set_approval(TEACHER, student_uid="24BIT001", class_name="FYIT", status="Maybe")
    with pytest.raises(ValidationError, match="negative"):
        svc.set_approval(TEACHER, student_uid="24BIT001", class_name="FYIT", status="Approved", marks=-1)
    with pytest.raises(ValidationError, match="Marks must be a number"):
        svc.set_approval(TEACHER, student_uid="24BIT001", class_name="FYIT", status="Approved", marks=float("nan"))
    with pytest.raises(ValidationError, match="Credits must be a number"):
        svc.set_approval(TEACHER, student_uid="24BIT001", class_name="FYIT", status="Approved", credits=float("inf"))
