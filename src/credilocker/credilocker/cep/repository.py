from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import CepSubmission, CreditTier, Requirement


class CepRepository(Protocol):
    def list_requirements(self) -> Sequence[Requirement]:
        """Newest first."""

        raise NotImplementedError

    def get_requirement(self, requirement_id: int) -> Optional[Requirement]:
        raise NotImplementedError

    def create_requirement(
        self,
        *,
        teacher_employee_code: str,
        assigned_class: str,
        minimum_hours: float,
        deadline: date,
        credits_config: Sequence[CreditTier],
    ) -> int:
        raise NotImplementedError

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
        raise NotImplementedError

    def delete_requirement(self, requirement_id: int) -> bool:
        raise NotImplementedError

    def list_submissions(self, *, student_uid: Optional[str] = None) -> Sequence[CepSubmission]:
        """Newest first."""

        raise NotImplementedError

    def get_submission(self, submission_id: int) -> Optional[CepSubmission]:
        raise NotImplementedError

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
        raise NotImplementedError
