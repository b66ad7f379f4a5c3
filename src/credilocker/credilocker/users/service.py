from __future__ import annotations

import hmac
import logging

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..students.repository import StudentRepository
from .model import SessionUser
from .repository import TeacherRepository

logger = logging.getLogger(__name__)

_BAD_CREDENTIALS = "Invalid ID or password"


def _verify(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use case: sign students in by uid and teachers by employee code."""

    def __init__(self, teachers: TeacherRepository, students: StudentRepository):
        self._teachers = teachers
        self._students = students

    def authenticate(self, role: Role, identifier: str, password: str) -> SessionUser:
        identifier = (identifier or "").strip()
        if not identifier or not password:
            raise AuthenticationError(_BAD_CREDENTIALS)

        if role == Role.TEACHER:
            teacher = self._teachers.get_by_code(identifier)
            if not teacher or not _verify(teacher.password_hash, password):
                logger.info("Rejected teacher login for %s", identifier)
                raise AuthenticationError(_BAD_CREDENTIALS)
            return SessionUser(user_id=teacher.employee_code, name=teacher.name, role=Role.TEACHER)

        student = self._students.get_by_uid(identifier)
        if not student:
            logger.info("Rejected student login for %s", identifier)
            raise AuthenticationError(_BAD_CREDENTIALS)

        password_hash = self._students.get_password_hash(student.uid)
        if password_hash is None:
            # Imported students start with their uid as password.
            ok = hmac.compare_digest(password, student.uid)
            must_change = True
        else:
            ok = _verify(password_hash, password)
            must_change = False

        if not ok:
            logger.info("Rejected student login for %s", identifier)
            raise AuthenticationError(_BAD_CREDENTIALS)

        return SessionUser(
            user_id=student.uid,
            name=student.name,
            role=Role.STUDENT,
            class_name=student.class_name,
            must_change_password=must_change,
        )

    def change_password(self, user: SessionUser, *, current_password: str, new_password: str) -> None:
        self.authenticate(user.role, user.user_id, current_password)

        require_non_empty(new_password, "New password")
        require_min_length(new_password, "New password", 6)
        if new_password == user.user_id:
            raise ValidationError("New password must differ from your ID")

        password_hash = generate_password_hash(new_password)
        if user.role == Role.TEACHER:
            self._teachers.set_password_hash(user.user_id, password_hash)
        else:
            self._students.set_password_hash(user.user_id, password_hash)
