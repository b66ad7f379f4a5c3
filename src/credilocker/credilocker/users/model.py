from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Teacher:
    employee_code: str
    name: str
    email: Optional[str]
    password_hash: str


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    name: str
    role: Role
    class_name: Optional[str] = None
    must_change_password: bool = False

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "role": self.role.value,
            "class_name": self.class_name,
            "must_change_password": self.must_change_password,
        }

    @classmethod
    def from_session(cls, data) -> Optional["SessionUser"]:
        if not data.get("user_id"):
            return None
        return cls(
            user_id=str(data["user_id"]),
            name=data.get("name") or "",
            role=Role(data.get("role")),
            class_name=data.get("class_name"),
            must_change_password=bool(data.get("must_change_password")),
        )
