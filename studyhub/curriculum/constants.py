"""Fixed curriculum definition and scheduling defaults."""

from __future__ import annotations


DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5
REVISION_HISTORY_LIMIT = 50

LCS_PER_UNIT = 8
DEFAULT_STORAGE_KEY = "current_session"
LINK_CONTENT_TYPE = "link"

UNITS_DATA = (
    {"id": "u1", "title": "Foundations of Computer Science", "order": 1},
    {"id": "u2", "title": "Data Structures & Algorithms", "order": 2},
    {"id": "u3", "title": "Database Systems & SQL", "order": 3},
    {"id": "u4", "title": "Web Architectures", "order": 4},
    {"id": "u5", "title": "Distributed Systems", "order": 5},
)
