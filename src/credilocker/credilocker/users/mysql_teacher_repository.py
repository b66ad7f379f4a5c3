from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Teacher
from .repository import TeacherRepository


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_code(self, employee_code: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_code, name, email, password_hash
                FROM teachers
                WHERE employee_code=%s
                """,
                (employee_code,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Teacher(
                employee_code=row["employee_code"],
                name=row["name"],
                email=row.get("email"),
                password_hash=row["password_hash"],
            )

    def set_password_hash(self, employee_code: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE teachers SET password_hash=%s WHERE employee_code=%s",
                (password_hash, employee_code),
            )
            return cur.rowcount > 0
