from __future__ import annotations

from datetime import date, datetime, time
from typing import Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_json, normalize_mysql_time, to_json, updated_or_exists
from .model import Activity, AttendanceMark
from .repository import ActivityRepository, AttendanceRepository

_COLUMNS = "id, activity_name, date, time, venue, assigned_class, comments, cc_points, created_at"


def _to_activity(r: dict) -> Activity:
    return Activity(
        activity_id=int(r["id"]),
        activity_name=r["activity_name"],
        date=r["date"],
        time=normalize_mysql_time(r["time"]),
        venue=r["venue"],
        assigned_classes=tuple(from_json(r.get("assigned_class"), default=[])),
        comments=r.get("comments") or None,
        cc_points=int(r.get("cc_points") or 0),
        created_at=r.get("created_at"),
    )


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM co_curricular_activities ORDER BY created_at DESC, id DESC")
            return [_to_activity(r) for r in fetchall(cur)]

    def list_from(self, start: date, *, limit: Optional[int] = None) -> Sequence[Activity]:
        sql = f"SELECT {_COLUMNS} FROM co_curricular_activities WHERE date >= %s ORDER BY date ASC, time ASC"
        params: list[object] = [start]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_activity(r) for r in fetchall(cur)]

    def get(self, activity_id: int) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM co_curricular_activities WHERE id=%s", (int(activity_id),))
            r = fetchone(cur)
            return _to_activity(r) if r else None

    def create(
        self,
        *,
        activity_name: str,
        date: date,
        time: time,
        venue: str,
        assigned_classes: Sequence[str],
        comments: Optional[str],
        cc_points: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO co_curricular_activities(activity_name, date, time, venue, assigned_class, comments, cc_points)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (activity_name, date, time, venue, to_json(list(assigned_classes)), comments, int(cc_points)),
            )
            return int(cur.lastrowid)

    def update(
        self,
        activity_id: int,
        *,
        activity_name: str,
        date: date,
        time: time,
        venue: str,
        assigned_classes: Sequence[str],
        comments: Optional[str],
        cc_points: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE co_curricular_activities
                SET activity_name=%s, date=%s, time=%s, venue=%s, assigned_class=%s, comments=%s, cc_points=%s
                WHERE id=%s
                """,
                (
                    activity_name,
                    date,
                    time,
                    venue,
                    to_json(list(assigned_classes)),
                    comments,
                    int(cc_points),
                    int(activity_id),
                ),
            )
            return updated_or_exists(cur, table="co_curricular_activities", key_column="id", key=int(activity_id))

    def delete(self, activity_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM co_curricular_activities WHERE id=%s", (int(activity_id),))
            return cur.rowcount > 0


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_marks(
        self,
        *,
        activity_id: Optional[int] = None,
        student_uid: Optional[str] = None,
    ) -> Sequence[AttendanceMark]:
        clauses: list[str] = []
        params: list[object] = []
        if activity_id is not None:
            clauses.append("activity_id=%s")
            params.append(int(activity_id))
        if student_uid is not None:
            clauses.append("student_uid=%s")
            params.append(student_uid)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT activity_id, student_uid, attendance_status, marked_at, marked_by
                FROM co_curricular_attendance
                {where}
                """,
                tuple(params),
            )
            return [
                AttendanceMark(
                    activity_id=int(r["activity_id"]),
                    student_uid=r["student_uid"],
                    status=AttendanceStatus(r["attendance_status"]),
                    marked_at=r.get("marked_at"),
                    marked_by=r.get("marked_by"),
                )
                for r in fetchall(cur)
            ]

    def upsert_marks(
        self,
        *,
        activity_id: int,
        marks: Mapping[str, AttendanceStatus],
        marked_by: str,
        marked_at: datetime,
    ) -> int:
        if not marks:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO co_curricular_attendance(activity_id, student_uid, attendance_status, marked_by, marked_at)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_status=VALUES(attendance_status),
                    marked_by=VALUES(marked_by),
                    marked_at=VALUES(marked_at)
                """,
                [(int(activity_id), uid, status.value, marked_by, marked_at) for uid, status in marks.items()],
            )
            return len(marks)
