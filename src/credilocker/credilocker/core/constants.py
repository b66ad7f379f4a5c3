"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import DocumentType

CLASS_OPTIONS = ("FYIT", "FYSD", "SYIT", "SYSD")

REQUIRED_DOCUMENT_TYPES = frozenset(DocumentType)

DEFAULT_BUCKET = "student-submissions"
DEFAULT_SIGNED_URL_SECONDS = 120
DEFAULT_SESSION_DAYS = 7
DASHBOARD_TREND_DAYS = 7
UPCOMING_ACTIVITIES_LIMIT = 3
