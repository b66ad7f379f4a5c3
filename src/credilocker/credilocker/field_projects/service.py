from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import BinaryIO, Iterable, Optional, Sequence

from ..common.validators import require_finite
from ..core.constants import REQUIRED_DOCUMENT_TYPES
from ..core.enums import ApprovalStatus, DocumentType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..storage.service import Preview, UploadService
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from .model import Submission, SubmissionGroup
from .repository import FieldProjectRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionFilters:
    class_name: str = ""
    uid: str = ""
    name: str = ""


def is_complete(document_types: Iterable[DocumentType | str]) -> bool:
    """True when exactly the four required document types are present."""
    return {DocumentType(t) for t in document_types} == REQUIRED_DOCUMENT_TYPES


def filter_submissions(
    submissions: Sequence[Submission],
    students: Sequence[Student],
    filters: SubmissionFilters,
) -> list[Submission]:
    by_uid = {s.uid: s for s in students}
    uid_q = filters.uid.strip().lower()
    name_q = filters.name.strip().lower()

    out = []
    for sub in submissions:
        if filters.class_name and sub.class_name != filters.class_name:
            continue
        if uid_q and uid_q not in sub.student_uid.lower():
            continue
        if name_q:
            student = by_uid.get(sub.student_uid)
            if not student or name_q not in student.name.lower():
                continue
        out.append(sub)
    return out


def group_submissions(submissions: Sequence[Submission], students: Sequence[Student]) -> list[SubmissionGroup]:
    """Group by (student uid, class), keeping first-seen order."""

    names = {s.uid: s.name for s in students}
    groups: dict[tuple[str, str], SubmissionGroup] = {}
    for sub in submissions:
        key = (sub.student_uid, sub.class_name)
        group = groups.get(key)
        if group is None:
            group = SubmissionGroup(
                student_uid=sub.student_uid,
                class_name=sub.class_name,
                student_name=names.get(sub.student_uid, sub.student_uid),
            )
            groups[key] = group
        group.submissions.append(sub)
    return list(groups.values())


@dataclass(frozen=True)
class CompletionStats:
    complete: int
    complete_today: int
    started: int


def completion_stats(submissions: Sequence[Submission], *, today: date) -> CompletionStats:
    """Students holding all required documents, and those whose latest upload was today."""

    types: dict[str, set[DocumentType]] = {}
    latest: dict[str, datetime] = {}
    for sub in submissions:
        types.setdefault(sub.student_uid, set()).add(sub.document_type)
        if sub.student_uid not in latest or sub.uploaded_at > latest[sub.student_uid]:
            latest[sub.student_uid] = sub.uploaded_at

    complete = complete_today = 0
    for uid, doc_types in types.items():
        if is_complete(doc_types):
            complete += 1
            if latest[uid].date() == today:
                complete_today += 1
    return CompletionStats(complete=complete, complete_today=complete_today, started=len(types))


class FieldProjectService:
    def __init__(self, submissions: FieldProjectRepository, students: StudentRepository, uploads: UploadService):
        self._submissions = submissions
        self._students = students
        self._uploads = uploads

    def upload(
        self,
        user: SessionUser,
        *,
        document_type: str,
        filename: str,
        stream: BinaryIO,
        now: datetime | None = None,
    ) -> int:
        if user.role != Role.STUDENT:
            raise AuthorizationError("Upload only available for students")
        if not user.class_name:
            raise ValidationError("Your class is not set; contact your teacher")
        try:
            doc_type = DocumentType(document_type)
        except ValueError:
            raise ValidationError("Unknown document type")
        if not filename:
            raise ValidationError("Please choose a file")

        existing = self.for_student(user.user_id)
        if existing.get(doc_type):
            raise ValidationError(f"{doc_type.label} already uploaded; delete it first to replace it")

        file_url = self._uploads.upload(
            folder=f"field_project/{doc_type.value}",
            owner=user.user_id,
            filename=filename,
            stream=stream,
            now=now,
        )
        try:
            submission_id = self._submissions.create(
                student_uid=user.user_id,
                class_name=user.class_name,
                document_type=doc_type,
                file_url=file_url,
            )
        except Exception:
            self._uploads.remove_quietly(file_url)
            raise
        logger.info("Student %s uploaded %s", user.user_id, doc_type.value)
        return submission_id

    def for_student(self, student_uid: str) -> dict[DocumentType, Optional[Submission]]:
        """Latest submission per document type (None when missing)."""

        out: dict[DocumentType, Optional[Submission]] = {t: None for t in DocumentType}
        for sub in self._submissions.list_for_student(student_uid):
            if out[sub.document_type] is None:
                out[sub.document_type] = sub
        return out

    def teacher_view(self, filters: SubmissionFilters) -> list[SubmissionGroup]:
        students = self._students.list_all()
        subs = filter_submissions(self._submissions.list_all(), students, filters)
        groups = group_submissions(subs, students)

        approvals = {(a.student_uid, a.class_name): a for a in self._submissions.list_approvals()}
        for group in groups:
            group.approval = approvals.get((group.student_uid, group.class_name))
        return groups

    def _get_visible(self, user: SessionUser, submission_id: int) -> Submission:
        sub = self._submissions.get(submission_id)
        if not sub:
            raise NotFoundError("Submission not found")
        if user.role == Role.STUDENT and sub.student_uid != user.user_id:
            raise AuthorizationError("You can only access your own submissions")
        return sub

    def delete_submission(self, user: SessionUser, submission_id: int) -> None:
        sub = self._get_visible(user, submission_id)
        if not self._submissions.delete(sub.submission_id):
            raise NotFoundError("Submission not found")
        self._uploads.remove_quietly(sub.file_url)
        logger.info("%s %s deleted field-project submission %s", user.role.value, user.user_id, submission_id)

    def preview(self, user: SessionUser, submission_id: int) -> Preview:
        sub = self._get_visible(user, submission_id)
        return self._uploads.preview(sub.document_type.label, sub.file_url)

    def set_approval(
        self,
        user: SessionUser,
        *,
        student_uid: str,
        class_name: str,
        status: str,
        marks: float = 0,
        credits: float = 0,
    ) -> None:
        if user.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can approve field projects")
        try:
            approval_status = ApprovalStatus(status)
        except ValueError:
            raise ValidationError("Unknown approval status")
        require_finite(marks, "Marks")
        require_finite(credits, "Credits")
        if marks < 0 or credits < 0:
            raise ValidationError("Marks and credits cannot be negative")

        self._submissions.upsert_approval(
            student_uid=student_uid,
            class_name=class_name,
            status=approval_status,
            marks=marks,
            credits=credits,
            decided_by=user.user_id,
        )
