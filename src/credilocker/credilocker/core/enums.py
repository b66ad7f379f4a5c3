from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Who is signed in; drives page access."""

    STUDENT = "student"
    TEACHER = "teacher"


class DocumentType(str, Enum):
    """Documents that make up a field-project submission set."""

    COMPLETION_LETTER = "completion_letter"
    OUTCOME_FORM = "outcome_form"
    FEEDBACK_FORM = "feedback_form"
    VIDEO_PRESENTATION = "video_presentation"

    @property
    def label(self) -> str:
        return {
            DocumentType.COMPLETION_LETTER: "Completion Letter",
            DocumentType.OUTCOME_FORM: "Outcome Form",
            DocumentType.FEEDBACK_FORM: "Feedback Form",
            DocumentType.VIDEO_PRESENTATION: "Final Video Demonstration",
        }[self]

    @property
    def accept(self) -> str:
        if self == DocumentType.VIDEO_PRESENTATION:
            return "video/*"
        return ".pdf,image/*"


class AttendanceStatus(str, Enum):
    """Co-curricular attendance mark stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"


class ApprovalStatus(str, Enum):
    """Teacher decision on a field-project submission set."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
