"""Curriculum model, spaced-repetition scheduler and concept store."""

from .models import (
    AttachedFile,
    LearningConcept,
    StudyStats,
    Unit,
    UnitProgress,
    new_attachment,
    new_link,
)
from .srs import RevisionRecord, ReviewSchedule, ScheduleState, review
from .status import LCStatus, derive_status
from .store import BlobStore, ConceptStore

__all__ = [
    "AttachedFile",
    "BlobStore",
    "ConceptStore",
    "LCStatus",
    "LearningConcept",
    "ReviewSchedule",
    "RevisionRecord",
    "ScheduleState",
    "StudyStats",
    "Unit",
    "UnitProgress",
    "derive_status",
    "new_attachment",
    "new_link",
    "review",
]
