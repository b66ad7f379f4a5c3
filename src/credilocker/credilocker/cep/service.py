from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import BinaryIO, Optional, Sequence

from ..common.validators import require_class, require_finite, require_non_empty, require_positive
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..storage.service import Preview, UploadService
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from .model import CepSubmission, CreditTier, Requirement
from .repository import CepRepository

logger = logging.getLogger(__name__)


def total_hours(submissions: Sequence[CepSubmission]) -> float:
    return sum(s.hours for s in submissions)


def requirement_for_class(requirements: Sequence[Requirement], class_name: Optional[str]) -> Optional[Requirement]:
    for req in requirements:
        if req.assigned_class == class_name:
            return req
    return None


def progress_percent(hours: float, minimum_hours: float) -> float:
    if minimum_hours <= 0:
        return 0.0
    return min(hours / minimum_hours * 100, 100.0)


def credits_for_hours(hours: float, tiers: Sequence[CreditTier]) -> float:
    """Credits of the highest tier whose threshold `hours` reaches; 0 when none."""

    for tier in sorted(tiers, key=lambda t: t.hours, reverse=True):
        if hours >= tier.hours:
            return tier.credits
    return 0


def parse_credit_tiers(text: str) -> list[CreditTier]:
    """Parse form input such as ``30:1, 60:2`` (hours:credits pairs)."""

    tiers: list[CreditTier] = []
    for chunk in (text or "").replace("\n", ",").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        hours_s, sep, credits_s = chunk.partition(":")
        try:
            if not sep:
                raise ValueError(chunk)
            tier = CreditTier(hours=float(hours_s), credits=float(credits_s))
        except ValueError:
            raise ValidationError(f"Invalid credit tier '{chunk}'. Use hours:credits, e.g. 30:1")
        require_finite(tier.hours, "Credit tier hours")
        require_finite(tier.credits, "Credit tier credits")
        if tier.hours < 0 or tier.credits < 0:
            raise ValidationError("Credit tiers cannot be negative")
        tiers.append(tier)
    return sorted(tiers, key=lambda t: t.hours)


def parse_geolocation(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    lat_s, sep, lng_s = value.partition(",")
    try:
        lat, lng = float(lat_s), float(lng_s)
    except ValueError:
        raise ValidationError("Invalid geolocation")
    if not sep or not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValidationError("Invalid geolocation")
    return f"{lat},{lng}"


@dataclass(frozen=True)
class CepFilters:
    class_name: str = ""
    uid: str = ""
    name: str = ""


@dataclass
class StudentCepGroup:
    student_uid: str
    student_name: str
    class_name: Optional[str]
    submissions: list[CepSubmission] = field(default_factory=list)
    credits: float = 0

    @property
    def total_hours(self) -> float:
        return total_hours(self.submissions)


@dataclass(frozen=True)
class StudentProgress:
    requirement: Optional[Requirement]
    submissions: Sequence[CepSubmission]
    total_hours: float
    percent: float
    credits: float


def group_by_student(
    submissions: Sequence[CepSubmission],
    students: Sequence[Student],
    filters: CepFilters,
    requirements: Sequence[Requirement] = (),
) -> list[StudentCepGroup]:
    by_uid = {s.uid: s for s in students}
    uid_q = filters.uid.strip().lower()
    name_q = filters.name.strip().lower()

    groups: dict[str, StudentCepGroup] = {}
    for sub in submissions:
        student = by_uid.get(sub.student_uid)
        if filters.class_name and (not student or student.class_name != filters.class_name):
            continue
        if uid_q and uid_q not in sub.student_uid.lower():
            continue
        if name_q and (not student or name_q not in student.name.lower()):
            continue

        group = groups.get(sub.student_uid)
        if group is None:
            group = StudentCepGroup(
                student_uid=sub.student_uid,
                student_name=student.name if student else sub.student_uid,
                class_name=student.class_name if student else None,
            )
            groups[sub.student_uid] = group
        group.submissions.append(sub)

    for group in groups.values():
        req = requirement_for_class(requirements, group.class_name)
        group.credits = credits_for_hours(group.total_hours, req.credits_config) if req else 0
    return list(groups.values())


class CepService:
    def __init__(self, cep: CepRepository, students: StudentRepository, uploads: UploadService):
        self._cep = cep
        self._students = students
        self._uploads = uploads

    @staticmethod
    def _require_teacher(user: SessionUser) -> None:
        if user.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can manage CEP requirements")

    def list_requirements(self) -> Sequence[Requirement]:
        return self._cep.list_requirements()

    def save_requirement(
        self,
        user: SessionUser,
        *,
        assigned_class: str,
        minimum_hours: float,
        deadline: date,
        credits_config: Sequence[CreditTier] = (),
        requirement_id: Optional[int] = None,
    ) -> int:
        self._require_teacher(user)
        assigned_class = require_class(assigned_class)
        require_positive(minimum_hours, "Minimum hours")
        if deadline is None:
            raise ValidationError("Deadline is required")

        fields = dict(
            teacher_employee_code=user.user_id,
            assigned_class=assigned_class,
            minimum_hours=float(minimum_hours),
            deadline=deadline,
            credits_config=list(credits_config),
        )
        if requirement_id:
            if not self._cep.update_requirement(int(requirement_id), **fields):
                raise NotFoundError("Requirement not found")
            return int(requirement_id)
        return self._cep.create_requirement(**fields)

    def delete_requirement(self, user: SessionUser, requirement_id: int) -> None:
        self._require_teacher(user)
        if not self._cep.delete_requirement(int(requirement_id)):
            raise NotFoundError("Requirement not found")

    def submit_activity(
        self,
        user: SessionUser,
        *,
        activity_name: str,
        hours: float,
        activity_date: date,
        location: str,
        certificate: tuple[str, BinaryIO],
        picture: tuple[str, BinaryIO],
        geolocation: Optional[str] = None,
        now: datetime | None = None,
    ) -> int:
        """Store both evidence files, then the submission row.

        `certificate` and `picture` are (filename, stream) pairs.
        """

        if user.role != Role.STUDENT:
            raise AuthorizationError("Only students can submit CEP activities")
        activity_name = require_non_empty(activity_name, "Activity name")
        location = require_non_empty(location, "Location")
        require_positive(hours, "Hours")
        if activity_date is None:
            raise ValidationError("Activity date is required")
        if not certificate or not certificate[0] or not picture or not picture[0]:
            raise ValidationError("Certificate and picture are both required")
        geolocation = parse_geolocation(geolocation)

        cert_url = self._uploads.upload(
            folder="cep/certificates", owner=user.user_id, filename=certificate[0], stream=certificate[1], now=now
        )
        try:
            pic_url = self._uploads.upload(
                folder="cep/pictures", owner=user.user_id, filename=picture[0], stream=picture[1], now=now
            )
        except DomainError:
            self._uploads.remove_quietly(cert_url)
            raise

        try:
            submission_id = self._cep.create_submission(
                student_uid=user.user_id,
                activity_name=activity_name,
                hours=float(hours),
                activity_date=activity_date,
                location=location,
                certificate_url=cert_url,
                picture_url=pic_url,
                geolocation=geolocation,
            )
        except Exception:
            self._uploads.remove_quietly(cert_url)
            self._uploads.remove_quietly(pic_url)
            raise

        logger.info("Student %s logged %.2f CEP hours", user.user_id, float(hours))
        return submission_id

    def student_progress(self, user: SessionUser) -> StudentProgress:
        submissions = self._cep.list_submissions(student_uid=user.user_id)
        req = requirement_for_class(self._cep.list_requirements(), user.class_name)
        hours = total_hours(submissions)
        return StudentProgress(
            requirement=req,
            submissions=submissions,
            total_hours=hours,
            percent=progress_percent(hours, req.minimum_hours) if req else 0.0,
            credits=credits_for_hours(hours, req.credits_config) if req else 0,
        )

    def teacher_view(self, filters: CepFilters) -> list[StudentCepGroup]:
        return group_by_student(
            self._cep.list_submissions(),
            self._students.list_all(),
            filters,
            self._cep.list_requirements(),
        )

    def preview(self, user: SessionUser, submission_id: int, *, which: str) -> Preview:
        sub = self._cep.get_submission(int(submission_id))
        if not sub:
            raise NotFoundError("Submission not found")
        if user.role == Role.STUDENT and sub.student_uid != user.user_id:
            raise AuthorizationError("You can only access your own submissions")
        if which == "certificate":
            return self._uploads.preview("Certificate", sub.certificate_url)
        if which == "picture":
            return self._uploads.preview("Picture", sub.picture_url)
        raise ValidationError("Unknown attachment")
