from __future__ import annotations

import csv
import io
import logging
from typing import Optional, Sequence

from ..common.validators import require_class, require_non_empty
from ..core.constants import CLASS_OPTIONS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import RosterRow, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = ("uid", "email", "name", "class")


def filter_students(students: Sequence[Student], *, class_filter: str = "", search: str = "") -> list[Student]:
    """Class equality plus a case-insensitive search over uid, name and email."""

    q = (search or "").strip().lower()
    out = []
    for s in students:
        if class_filter and s.class_name != class_filter:
            continue
        if q and q not in s.uid.lower() and q not in s.name.lower() and q not in (s.email or "").lower():
            continue
        out.append(s)
    return out


def _to_semester(value: str) -> Optional[int]:
    value = value.strip()
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return int(number)


def parse_roster_csv(text: str) -> list[RosterRow]:
    """Parse an uploaded roster.

    Header: uid,email,name,class[,semester][,phone_number] in any order and case.
    Rows without a uid are skipped; an invalid class rejects the whole file.
    """

    lines = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    if not lines:
        return []

    header = [h.strip().lower() for h in lines[0]]
    for col in REQUIRED_CSV_COLUMNS:
        if col not in header:
            raise ValidationError(f"CSV missing required column: {col}")

    idx = {col: header.index(col) for col in header}

    def cell(cols: list[str], col: str) -> str:
        i = idx.get(col)
        if i is None or i >= len(cols):
            return ""
        return cols[i].strip()

    rows: list[RosterRow] = []
    for line_no, cols in enumerate(lines[1:], start=2):
        uid = cell(cols, "uid")
        if not uid:
            continue
        cls = cell(cols, "class")
        if cls not in CLASS_OPTIONS:
            raise ValidationError(f"Row {line_no}: invalid class '{cls}'. Allowed: {', '.join(CLASS_OPTIONS)}")
        rows.append(
            RosterRow(
                uid=uid,
                email=cell(cols, "email"),
                name=cell(cols, "name"),
                class_name=cls,
                semester=_to_semester(cell(cols, "semester")) if "semester" in idx else None,
                phone_number=(cell(cols, "phone_number") or None) if "phone_number" in idx else None,
            )
        )
    return rows


class StudentService:
    """Use cases behind the Manage Classes screen."""

    def __init__(self, students: StudentRepository):
        self._students = students

    @staticmethod
    def _require_teacher(current_role: Role) -> None:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can manage classes")

    def list_students(self, *, class_filter: str = "", search: str = "") -> list[Student]:
        return filter_students(self._students.list_all(), class_filter=class_filter, search=search)

    def update_student(
        self,
        *,
        current_role: Role,
        uid: str,
        name: str,
        email: str,
        class_name: str,
        semester: Optional[int] = None,
        phone_number: Optional[str] = None,
    ) -> None:
        self._require_teacher(current_role)
        class_name = require_class(class_name)
        name = require_non_empty(name, "Name")
        if semester is not None and semester <= 0:
            raise ValidationError("Semester must be greater than 0")

        updated = self._students.update(
            uid,
            email=(email or "").strip(),
            phone_number=(phone_number or "").strip() or None,
            name=name,
            class_name=class_name,
            semester=semester,
        )
        if not updated:
            raise NotFoundError("Student not found")

    def import_csv(self, *, current_role: Role, text: str) -> int:
        self._require_teacher(current_role)
        rows = parse_roster_csv(text)
        if not rows:
            raise ValidationError("CSV file is empty")
        count = self._students.upsert_many(rows)
        logger.info("Imported %d roster rows", count)
        return count

    def bulk_delete_class(self, *, current_role: Role, class_name: str) -> int:
        self._require_teacher(current_role)
        if not class_name:
            raise ValidationError("Please select a class")
        class_name = require_class(class_name)
        deleted = self._students.delete_by_class(class_name)
        logger.info("Deleted %d students from %s", deleted, class_name)
        return deleted

    def bulk_update_semester(self, *, current_role: Role, class_name: str, semester: Optional[int]) -> int:
        self._require_teacher(current_role)
        if not class_name:
            raise ValidationError("Please select a class")
        class_name = require_class(class_name)
        if semester is None or int(semester) <= 0:
            raise ValidationError("Enter a valid semester number")
        return self._students.update_semester_by_class(class_name, int(semester))
