from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import RosterRow, Student


class StudentRepository(Protocol):
    def list_all(self) -> Sequence[Student]:
        """All students ordered by class, then uid."""

        raise NotImplementedError

    def list_by_class(self, class_name: str) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_classes(self, class_names: Sequence[str]) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_uid(self, uid: str) -> Optional[Student]:
        raise NotImplementedError

    def get_password_hash(self, uid: str) -> Optional[str]:
        raise NotImplementedError

    def set_password_hash(self, uid: str, password_hash: str) -> bool:
        raise NotImplementedError

    def update(
        self,
        uid: str,
        *,
        email: str,
        phone_number: Optional[str],
        name: str,
        class_name: str,
        semester: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def upsert_many(self, rows: Sequence[RosterRow]) -> int:
        """Insert or update by uid; existing passwords are left untouched."""

        raise NotImplementedError

    def delete_by_class(self, class_name: str) -> int:
        raise NotImplementedError

    def update_semester_by_class(self, class_name: str, semester: int) -> int:
        raise NotImplementedError
