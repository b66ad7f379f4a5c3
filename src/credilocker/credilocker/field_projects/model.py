from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import ApprovalStatus, DocumentType


@dataclass(frozen=True)
class Submission:
    submission_id: int
    student_uid: str
    class_name: str
    document_type: DocumentType
    file_url: str
    uploaded_at: datetime


@dataclass(frozen=True)
class Approval:
    student_uid: str
    class_name: str
    status: ApprovalStatus = ApprovalStatus.PENDING
    marks: float = 0
    credits: float = 0
    decided_by: Optional[str] = None


@dataclass
class SubmissionGroup:
    """Teacher view: every document one student uploaded for one class."""

    student_uid: str
    class_name: str
    student_name: str
    submissions: list[Submission] = field(default_factory=list)
    approval: Optional[Approval] = None

    @property
    def document_types(self) -> set[DocumentType]:
        return {s.document_type for s in self.submissions}
