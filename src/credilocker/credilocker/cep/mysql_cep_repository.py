from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_json, to_json, updated_or_exists
from .model import CepSubmission, CreditTier, Requirement
from .repository import CepRepository

_REQ_COLUMNS = "id, teacher_employee_code, assigned_class, minimum_hours, deadline, credits_config, created_at"
_SUB_COLUMNS = (
    "id, student_uid, activity_name, hours, activity_date, location, "
    "certificate_url, picture_url, geolocation, submitted_at"
)


def _to_requirement(r: dict) -> Requirement:
    tiers = tuple(
        CreditTier(hours=float(t["hours"]), credits=float(t["credits"]))
        for t in from_json(r.get("credits_config"), default=[])
    )
    return Requirement(
        requirement_id=int(r["id"]),
        assigned_class=r["assigned_class"],
        minimum_hours=float(r["minimum_hours"]),
        deadline=r["deadline"],
        credits_config=tiers,
        teacher_employee_code=r.get("teacher_employee_code"),
        created_at=r.get("created_at"),
    )


def _to_submission(r: dict) -> CepSubmission:
    return CepSubmission(
        submission_id=int(r["id"]),
        student_uid=r["student_uid"],
        activity_name=r["activity_name"],
        hours=float(r["hours"]),
        activity_date=r["activity_date"],
        location=r["location"],
        certificate_url=r["certificate_url"],
        picture_url=r["picture_url"],
        geolocation=r.get("geolocation") or None,
        submitted_at=r["submitted_at"],
    )


class MySQLCepRepository(CepRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_requirements(self) -> Sequence[Requirement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REQ_COLUMNS} FROM cep_requirements ORDER BY created_at DESC, id DESC")
            return [_to_requirement(r) for r in fetchall(cur)]

    def get_requirement(self, requirement_id: int) -> Optional[Requirement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REQ_COLUMNS} FROM cep_requirements WHERE id=%s", (int(requirement_id),))
            r = fetchone(cur)
            return _to_requirement(r) if r else None

    def create_requirement(
        self,
        *,
        teacher_employee_code: str,
        assigned_class: str,
        minimum_hours: float,
        deadline: date,
        credits_config: Sequence[CreditTier],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cep_requirements(teacher_employee_code, assigned_class, minimum_hours, deadline, credits_config)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    teacher_employee_code,
                    assigned_class,
                    float(minimum_hours),
                    deadline,
                    to_json([t.to_dict() for t in credits_config]),
                ),
            )
            return int(cur.lastrowid)

    def update_requirement(
        self,
        requirement_id: int,
        *,
        teacher_employee_code: str,
        assigned_class: str,
        minimum_hours: float,
        deadline: date,
        credits_config: Sequence[CreditTier],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE cep_requirements
                SET teacher_employee_code=%s, assigned_class=%s, minimum_hours=%s, deadline=%s, credits_config=%s
                WHERE id=%s
                """,
                (
                    teacher_employee_code,
                    assigned_class,
                    float(minimum_hours),
                    deadline,
                    to_json([t.to_dict() for t in credits_config]),
                    int(requirement_id),
                ),
            )
            return updated_or_exists(cur, table="cep_requirements", key_column="id", key=int(requirement_id))

    def delete_requirement(self, requirement_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM cep_requirements WHERE id=%s", (int(requirement_id),))
            return cur.rowcount > 0

    def list_submissions(self, *, student_uid: Optional[str] = None) -> Sequence[CepSubmission]:
        where = "WHERE student_uid=%s" if student_uid else ""
        params = (student_uid,) if student_uid else ()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SUB_COLUMNS} FROM cep_submissions {where} ORDER BY submitted_at DESC, id DESC",
                params,
            )
            return [_to_submission(r) for r in fetchall(cur)]

    def get_submission(self, submission_id: int) -> Optional[CepSubmission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SUB_COLUMNS} FROM cep_submissions WHERE id=%s", (int(submission_id),))
            r = fetchone(cur)
            return _to_submission(r) if r else None

    def create_submission(
        self,
        *,
        student_uid: str,
        activity_name: str,
        hours: float,
        activity_date: date,
        location: str,
        certificate_url: str,
        picture_url: str,
        geolocation: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cep_submissions(
                    student_uid, activity_name, hours, activity_date, location,
                    certificate_url, picture_url, geolocation
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    student_uid,
                    activity_name,
                    float(hours),
                    activity_date,
                    location,
                    certificate_url,
                    picture_url,
                    geolocation,
                ),
            )
            return int(cur.lastrowid)
