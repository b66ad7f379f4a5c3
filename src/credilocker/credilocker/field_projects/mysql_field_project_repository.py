from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ApprovalStatus, DocumentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Approval, Submission
from .repository import FieldProjectRepository


def _to_submission(r: dict) -> Submission:
    return Submission(
        submission_id=int(r["id"]),
        student_uid=r["student_uid"],
        class_name=r["class"],
        document_type=DocumentType(r["document_type"]),
        file_url=r["file_url"],
        uploaded_at=r["uploaded_at"],
    )


class MySQLFieldProjectRepository(FieldProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_student(self, student_uid: str) -> Sequence[Submission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, student_uid, class, document_type, file_url, uploaded_at
                FROM field_project_submissions
                WHERE student_uid=%s
                ORDER BY uploaded_at DESC, id DESC
                """,
                (student_uid,),
            )
            return [_to_submission(r) for r in fetchall(cur)]

    def list_all(self, *, class_name: Optional[str] = None) -> Sequence[Submission]:
        where = "WHERE class=%s" if class_name else ""
        params = (class_name,) if class_name else ()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, student_uid, class, document_type, file_url, uploaded_at
                FROM field_project_submissions
                {where}
                ORDER BY uploaded_at DESC, id DESC
                """,
                params,
            )
            return [_to_submission(r) for r in fetchall(cur)]

    def get(self, submission_id: int) -> Optional[Submission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, student_uid, class, document_type, file_url, uploaded_at
                FROM field_project_submissions
                WHERE id=%s
                """,
                (int(submission_id),),
            )
            r = fetchone(cur)
            return _to_submission(r) if r else None

    def create(self, *, student_uid: str, class_name: str, document_type: DocumentType, file_url: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO field_project_submissions(student_uid, class, document_type, file_url)
                VALUES(%s,%s,%s,%s)
                """,
                (student_uid, class_name, document_type.value, file_url),
            )
            return int(cur.lastrowid)

    def delete(self, submission_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM field_project_submissions WHERE id=%s", (int(submission_id),))
            return cur.rowcount > 0

    def list_approvals(self, *, class_name: Optional[str] = None) -> Sequence[Approval]:
        where = "WHERE class=%s" if class_name else ""
        params = (class_name,) if class_name else ()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT student_uid, class, approval_status, marks_allotted, credits_allotted, decided_by
                FROM field_project_approvals
                {where}
                """,
                params,
            )
            return [
                Approval(
                    student_uid=r["student_uid"],
                    class_name=r["class"],
                    status=ApprovalStatus(r["approval_status"]),
                    marks=float(r["marks_allotted"] or 0),
                    credits=float(r["credits_allotted"] or 0),
                    decided_by=r.get("decided_by"),
                )
                for r in fetchall(cur)
            ]

    def upsert_approval(
        self,
        *,
        student_uid: str,
        class_name: str,
        status: ApprovalStatus,
        marks: float,
        credits: float,
        decided_by: str,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO field_project_approvals(student_uid, class, approval_status, marks_allotted, credits_allotted, decided_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    approval_status=VALUES(approval_status),
                    marks_allotted=VALUES(marks_allotted),
                    credits_allotted=VALUES(credits_allotted),
                    decided_by=VALUES(decided_by)
                """,
                (student_uid, class_name, status.value, float(marks), float(credits), decided_by),
            )
