from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, updated_or_exists
from .model import RosterRow, Student
from .repository import StudentRepository

_COLUMNS = "uid, email, phone_number, name, class, semester"


def _to_student(r: dict) -> Student:
    return Student(
        uid=r["uid"],
        name=r["name"],
        email=r.get("email") or "",
        class_name=r["class"],
        semester=int(r["semester"]) if r.get("semester") is not None else None,
        phone_number=r.get("phone_number") or None,
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY class ASC, uid ASC")
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_class(self, class_name: str) -> Sequence[Student]:
        return self.list_by_classes([class_name])

    def list_by_classes(self, class_names: Sequence[str]) -> Sequence[Student]:
        if not class_names:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE class IN ({in_clause(class_names)}) ORDER BY class ASC, uid ASC",
                tuple(class_names),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def get_by_uid(self, uid: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE uid=%s", (uid,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_password_hash(self, uid: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT password_hash FROM students WHERE uid=%s", (uid,))
            r = fetchone(cur)
            return r.get("password_hash") if r else None

    def set_password_hash(self, uid: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET password_hash=%s WHERE uid=%s", (password_hash, uid))
            return cur.rowcount > 0

    def update(
        self,
        uid: str,
        *,
        email: str,
        phone_number: Optional[str],
        name: str,
        class_name: str,
        semester: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET email=%s, phone_number=%s, name=%s, class=%s, semester=%s
                WHERE uid=%s
                """,
                (email, phone_number, name, class_name, semester, uid),
            )
            return updated_or_exists(cur, table="students", key_column="uid", key=uid)

    def upsert_many(self, rows: Sequence[RosterRow]) -> int:
        if not rows:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO students(uid, email, name, class, semester, phone_number)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    email=VALUES(email),
                    name=VALUES(name),
                    class=VALUES(class),
                    semester=VALUES(semester),
                    phone_number=COALESCE(VALUES(phone_number), phone_number)
                """,
                [
                    (
                        r.uid,
                        r.email,
                        r.name,
                        r.class_name,
                        r.semester,
                        r.phone_number,
                    )
                    for r in rows
                ],
            )
            return len(rows)

    def delete_by_class(self, class_name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE class=%s", (class_name,))
            return int(cur.rowcount)

    def update_semester_by_class(self, class_name: str, semester: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET semester=%s WHERE class=%s", (int(semester), class_name))
            return int(cur.rowcount)
