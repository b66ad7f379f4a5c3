from __future__ import annotations

from typing import Optional, Protocol

from .model import Teacher


class TeacherRepository(Protocol):
    def get_by_code(self, employee_code: str) -> Optional[Teacher]:
        raise NotImplementedError

    def set_password_hash(self, employee_code: str, password_hash: str) -> bool:
        raise NotImplementedError
