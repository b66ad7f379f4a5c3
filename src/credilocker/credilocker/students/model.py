from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Roster entry for one student.

    `class_name` maps to the `class` column (a reserved word in Python).
    """

    uid: str
    name: str
    email: str
    class_name: str
    semester: Optional[int] = None
    phone_number: Optional[str] = None


@dataclass(frozen=True)
class RosterRow:
    """One parsed CSV line ready to be upserted."""

    uid: str
    email: str
    name: str
    class_name: str
    semester: Optional[int] = None
    phone_number: Optional[str] = None
