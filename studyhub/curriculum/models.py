"""Curriculum entities and their persisted (camelCase) representation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from studyhub.curriculum.constants import (
    DEFAULT_EASE_FACTOR,
    LCS_PER_UNIT,
    LINK_CONTENT_TYPE,
    UNITS_DATA,
)
from studyhub.curriculum.srs import (
    RevisionRecord,
    ReviewSchedule,
    ScheduleState,
    prepend_revision,
)
from studyhub.curriculum.status import LCStatus, derive_status
from studyhub.curriculum.timeutils import format_timestamp, parse_timestamp, utcnow


@dataclass(frozen=True, slots=True)
class Unit:
    """A curriculum grouping of learning concepts."""

    id: str
    title: str
    order: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "order": self.order}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Unit":
        return cls(id=data["id"], title=data["title"], order=int(data["order"]))


@dataclass(frozen=True, slots=True)
class AttachedFile:
    """Study material attached to a concept: an uploaded file or a link."""

    id: str
    name: str
    content_type: str
    size: int
    data: str
    uploaded_at: datetime

    @property
    def is_link(self) -> bool:
        return self.content_type == LINK_CONTENT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.content_type,
            "size": self.size,
            "data": self.data,
            "uploadedAt": format_timestamp(self.uploaded_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttachedFile":
        return cls(
            id=data["id"],
            name=data["name"],
            content_type=data.get("type") or "",
            size=int(data.get("size") or 0),
            data=data.get("data") or "",
            uploaded_at=parse_timestamp(data["uploadedAt"]),
        )


def _new_file_id() -> str:
    return uuid.uuid4().hex[:12]


def new_attachment(
    name: str,
    content_type: str,
    data: str,
    size: Optional[int] = None,
    now: Optional[datetime] = None,
) -> AttachedFile:
    """Build an uploaded-file attachment with a fresh id."""
    return AttachedFile(
        id=_new_file_id(),
        name=name,
        content_type=content_type,
        size=len(data) if size is None else size,
        data=data,
        uploaded_at=now or utcnow(),
    )


def new_link(title: str, url: str, now: Optional[datetime] = None) -> AttachedFile:
    """Build a link resource; links carry the URL as data and have no size."""
    return AttachedFile(
        id=_new_file_id(),
        name=title.strip(),
        content_type=LINK_CONTENT_TYPE,
        size=0,
        data=url.strip(),
        uploaded_at=now or utcnow(),
    )


@dataclass(frozen=True, slots=True)
class LearningConcept:
    """A schedulable unit of study material."""

    id: str
    unit_id: str
    title: str
    status: LCStatus = LCStatus.NOT_UPLOADED
    revision_count: int = 0
    last_revised_at: Optional[datetime] = None
    next_review_at: Optional[datetime] = None
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0
    repetition: int = 0
    files: Tuple[AttachedFile, ...] = ()
    revision_history: Tuple[RevisionRecord, ...] = ()

    @property
    def schedule_state(self) -> ScheduleState:
        return ScheduleState(
            repetition=self.repetition,
            interval=self.interval,
            ease_factor=self.ease_factor,
        )

    def with_derived_status(self, now: Optional[datetime] = None) -> "LearningConcept":
        """Return a copy whose status reflects ``now``."""
        status = derive_status(bool(self.files), self.next_review_at, now)
        if status is self.status:
            return self
        return replace(self, status=status)

    def with_review(self, schedule: ReviewSchedule) -> "LearningConcept":
        """Apply a scheduler result; a freshly reviewed concept is never due."""
        return replace(
            self,
            status=LCStatus.UPLOADED if self.files else LCStatus.NOT_UPLOADED,
            revision_count=self.revision_count + 1,
            last_revised_at=schedule.last_revised_at,
            next_review_at=schedule.next_review_at,
            ease_factor=schedule.ease_factor,
            interval=schedule.interval,
            repetition=schedule.repetition,
            revision_history=prepend_revision(self.revision_history, schedule.record),
        )

    def with_files(self, files: Sequence[AttachedFile], now: Optional[datetime] = None) -> "LearningConcept":
        """Replace the attachment list, leaving review state untouched."""
        files = tuple(files)
        return replace(
            self,
            files=files,
            status=derive_status(bool(files), self.next_review_at, now),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "unitId": self.unit_id,
            "title": self.title,
            "status": self.status.value,
            "revisionCount": self.revision_count,
            "lastRevisedAt": format_timestamp(self.last_revised_at),
            "nextReviewAt": format_timestamp(self.next_review_at),
            "easeFactor": self.ease_factor,
            "interval": self.interval,
            "repetition": self.repetition,
            "files": [item.to_dict() for item in self.files],
            "revisionHistory": [record.to_dict() for record in self.revision_history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearningConcept":
        return cls(
            id=data["id"],
            unit_id=data["unitId"],
            title=data["title"],
            status=LCStatus(data.get("status") or LCStatus.NOT_UPLOADED.value),
            revision_count=int(data.get("revisionCount") or 0),
            last_revised_at=parse_timestamp(data.get("lastRevisedAt")),
            next_review_at=parse_timestamp(data.get("nextReviewAt")),
            ease_factor=float(data.get("easeFactor", DEFAULT_EASE_FACTOR)),
            interval=int(data.get("interval") or 0),
            repetition=int(data.get("repetition") or 0),
            files=tuple(AttachedFile.from_dict(item) for item in data.get("files") or ()),
            revision_history=tuple(
                RevisionRecord.from_dict(item) for item in data.get("revisionHistory") or ()
            ),
        )


@dataclass(frozen=True, slots=True)
class StudyStats:
    """Dashboard counters across the whole curriculum."""

    total_units: int
    total_concepts: int
    uploaded_count: int
    remaining_count: int
    needs_revision_count: int


@dataclass(frozen=True, slots=True)
class UnitProgress:
    """How far a single unit has been covered."""

    unit: Unit
    concept_count: int
    uploaded_count: int
    needs_revision_count: int

    @property
    def percent_uploaded(self) -> float:
        if not self.concept_count:
            return 0.0
        return self.uploaded_count / self.concept_count * 100


def build_initial_curriculum() -> Tuple[List[Unit], List[LearningConcept]]:
    """Create the fixed set of units with their default, never-reviewed concepts."""
    units = [Unit.from_dict(item) for item in UNITS_DATA]
    concepts = [
        LearningConcept(id=f"{unit.id}-lc{index}", unit_id=unit.id, title=f"Concept {index}")
        for unit in units
        for index in range(1, LCS_PER_UNIT + 1)
    ]
    return units, concepts


def dump_aggregate(units: Iterable[Unit], concepts: Iterable[LearningConcept]) -> Dict[str, Any]:
    """Serialize the curriculum to the single persisted blob."""
    return {
        "units": [unit.to_dict() for unit in units],
        "lcs": [concept.to_dict() for concept in concepts],
    }


def load_aggregate(payload: Dict[str, Any]) -> Tuple[List[Unit], List[LearningConcept]]:
    """Inverse of :func:`dump_aggregate`."""
    units = [Unit.from_dict(item) for item in payload.get("units") or ()]
    concepts = [LearningConcept.from_dict(item) for item in payload.get("lcs") or ()]
    return units, concepts
