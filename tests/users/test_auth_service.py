from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash, generate_password_hash

from src.credilocker.credilocker.core.enums import Role
from src.credilocker.credilocker.core.exceptions import AuthenticationError, ValidationError
from src.credilocker.credilocker.students.model import Student
from src.credilocker.credilocker.users.model import SessionUser, Teacher
from src.credilocker.credilocker.users.service import AuthService
from tests.fakes import FakeStudentsRepo


class FakeTeachersRepo:
    def __init__(self, teachers=()):
        self._teachers = {t.employee_code: t for t in teachers}
        self.hashes = {}

    def get_by_code(self, employee_code):
        return self._teachers.get(employee_code)

    def set_password_hash(self, employee_code, password_hash):
        self.hashes[employee_code] = password_hash
        return True


def _service(student_hashes=None):
    teachers = FakeTeachersRepo(
        [Teacher(employee_code="T001", name="Demo Teacher", email=None, password_hash=generate_password_hash("teacher123"))]
    )
    students = FakeStudentsRepo(
        [Student(uid="24BIT001", name="Asha Patel", email="asha@college.edu", class_name="FYIT")],
        hashes=student_hashes,
    )
    return AuthService(teachers, students), teachers, students


def test_teacher_logs_in_with_employee_code():
    svc, _, _ = _service()

    user = svc.authenticate(Role.TEACHER, "T001", "teacher123")

    assert user.role == Role.TEACHER
    assert user.class_name is None


def test_student_without_password_signs_in_with_uid_and_must_change_it():
    svc, _, _ = _service()

    user = svc.authenticate(Role.STUDENT, " 24BIT001 ", "24BIT001")

    assert user.user_id == "24BIT001"
    assert user.class_name == "FYIT"
    assert user.must_change_password is True


def test_student_with_password_hash():
    svc, _, _ = _service({"24BIT001": generate_password_hash("s3cret!")})

    user = svc.authenticate(Role.STUDENT, "24BIT001", "s3cret!")
    assert user.must_change_password is False

    with pytest.raises(AuthenticationError):
        svc.authenticate(Role.STUDENT, "24BIT001", "24BIT001")


@pytest.mark.parametrize(
    "role, identifier, password",
    [
        (Role.TEACHER, "T001", "wrong"),
        (Role.TEACHER, "24BIT001", "24BIT001"),
        (Role.STUDENT, "T001", "teacher123"),
        (Role.STUDENT, "NOPE", "NOPE"),
        (Role.STUDENT, "", ""),
    ],
)
def test_failures_share_one_generic_message(role, identifier, password):
    svc, _, _ = _service()

    with pytest.raises(AuthenticationError, match="^Invalid ID or password$"):
        svc.authenticate(role, identifier, password)


def test_corrupted_hash_is_treated_as_bad_password():
    svc, _, _ = _service({"24BIT001": "CHANGE_ME"})

    with pytest.raises(AuthenticationError):
        svc.authenticate(Role.STUDENT, "24BIT001", "CHANGE_ME")


def test_change_password_stores_new_hash():
    svc, _, students = _service()
    user = SessionUser(user_id="24BIT001", name="Asha", role=Role.STUDENT, class_name="FYIT")

    svc.change_password(user, current_password="24BIT001", new_password="better-pass")

    assert check_password_hash(students.hashes["24BIT001"], "better-pass")


def test_change_password_rules():
    svc, _, _ = _service()
    user = SessionUser(user_id="24BIT001", name="Asha", role=Role.STUDENT, class_name="FYIT")

    with pytest.raises(ValidationError, match="at least 6"):
        svc.change_password(user, current_password="24BIT001", new_password="abc")
    with pytest.raises(ValidationError, match="differ"):
        svc.change_password(user, current_password="24BIT001", new_password="24BIT001")
    with pytest.raises(AuthenticationError):
        svc.change_password(user, current_password="guess", new_password="better-pass")


def test_session_round_trip():
    user = SessionUser(user_id="24BIT001", name="Asha", role=Role.STUDENT, class_name="FYIT")

    assert SessionUser.from_session(user.to_session()) == user
    assert SessionUser.from_session({}) is None
