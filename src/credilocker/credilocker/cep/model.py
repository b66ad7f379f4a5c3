from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class CreditTier:
    """Reaching `hours` earns `credits`."""

    hours: float
    credits: float

    def to_dict(self) -> dict:
        return {"hours": self.hours, "credits": self.credits}


@dataclass(frozen=True)
class Requirement:
    requirement_id: int
    assigned_class: str
    minimum_hours: float
    deadline: date
    credits_config: tuple[CreditTier, ...] = ()
    teacher_employee_code: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CepSubmission:
    submission_id: int
    student_uid: str
    activity_name: str
    hours: float
    activity_date: date
    location: str
    certificate_url: str
    picture_url: str
    submitted_at: datetime
    geolocation: Optional[str] = None
