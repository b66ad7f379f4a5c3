from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Page:
    page_id: str
    title: str
    endpoint: str


PAGES = (
    Page("landing", "Home", "dashboard"),
    Page("field-project", "Field Project", "field_project"),
    Page("community-engagement", "Community Engagement", "community_engagement"),
    Page("co-curricular", "Co-Curricular", "co_curricular"),
    Page("attendance", "Attendance", "attendance"),
    Page("manage-classes", "Manage Classes", "manage_classes"),
)

_STUDENT_PAGES = frozenset({"landing", "field-project", "community-engagement", "co-curricular"})


def accessible_pages(role: Role) -> list[str]:
    if role == Role.TEACHER:
        return [p.page_id for p in PAGES]
    return [p.page_id for p in PAGES if p.page_id in _STUDENT_PAGES]


def can_access(role: Role, page_id: str) -> bool:
    return page_id in accessible_pages(role)


def navigation_for(role: Role) -> list[Page]:
    allowed = set(accessible_pages(role))
    return [p for p in PAGES if p.page_id in allowed]
