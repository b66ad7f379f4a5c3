from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, DocumentType
from .model import Approval, Submission


class FieldProjectRepository(Protocol):
    def list_for_student(self, student_uid: str) -> Sequence[Submission]:
        """Newest first."""

        raise NotImplementedError

    def list_all(self, *, class_name: Optional[str] = None) -> Sequence[Submission]:
        """Newest first, optionally restricted to one class."""

        raise NotImplementedError

    def get(self, submission_id: int) -> Optional[Submission]:
        raise NotImplementedError

    def create(self, *, student_uid: str, class_name: str, document_type: DocumentType, file_url: str) -> int:
        raise NotImplementedError

    def delete(self, submission_id: int) -> bool:
        raise NotImplementedError

    def list_approvals(self, *, class_name: Optional[str] = None) -> Sequence[Approval]:
        raise NotImplementedError

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
        raise NotImplementedError
