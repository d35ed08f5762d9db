"""Spaced-repetition scheduling for learning concept reviews."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from itertools import islice
from typing import Any, Dict, Iterable, Optional, Tuple

from studyhub.curriculum.constants import (
    DEFAULT_EASE_FACTOR,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
    REVISION_HISTORY_LIMIT,
)
from studyhub.curriculum.timeutils import ensure_aware, format_timestamp, parse_timestamp, utcnow
from studyhub.errors import InvalidQualityError


# Latest instant a datetime can hold; very long intervals saturate here.
FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class ScheduleState:
    """Scheduling fields a review starts from."""

    repetition: int = 0
    interval: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR


@dataclass(frozen=True, slots=True)
class RevisionRecord:
    """Snapshot of a single review and the schedule it produced."""

    date: datetime
    quality: int
    interval: int
    ease_factor: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": format_timestamp(self.date),
            "quality": self.quality,
            "interval": self.interval,
            "easeFactor": self.ease_factor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RevisionRecord":
        return cls(
            date=parse_timestamp(data["date"]),
            quality=int(data["quality"]),
            interval=int(data["interval"]),
            ease_factor=float(data["easeFactor"]),
        )


@dataclass(frozen=True, slots=True)
class ReviewSchedule:
    """Calculated review data for a concept after receiving a quality rating."""

    repetition: int
    interval: int
    ease_factor: float
    last_revised_at: datetime
    next_review_at: datetime
    record: RevisionRecord


def validate_quality(quality: object) -> int:
    """Return ``quality`` unchanged or raise ``InvalidQualityError``."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidQualityError(quality)
    return quality


def round_half_up(value: float) -> int:
    """Round to the nearest whole day, with halves rounding up."""
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """Apply the SM-2 ease adjustment, never dropping below the floor."""
    penalty = MAX_QUALITY - quality
    ease_factor = ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02))
    if ease_factor < MIN_EASE_FACTOR:
        ease_factor = MIN_EASE_FACTOR
    return ease_factor


def review(state: ScheduleState, quality: int, now: Optional[datetime] = None) -> ReviewSchedule:
    """Return the next review schedule using the SM-2 algorithm."""
    quality = validate_quality(quality)
    if now is None:
        now = utcnow()
    now = ensure_aware(now)

    if quality >= PASSING_QUALITY:
        if state.repetition == 0:
            interval = 1
        elif state.repetition == 1:
            interval = 6
        else:
            interval = round_half_up(state.interval * state.ease_factor)
        repetition = state.repetition + 1
    else:
        repetition = 0
        interval = 1

    try:
        next_review_at = now + timedelta(days=interval)
    except OverflowError:
        next_review_at = FAR_FUTURE

    ease_factor = next_ease_factor(state.ease_factor, quality)
    record = RevisionRecord(date=now, quality=quality, interval=interval, ease_factor=ease_factor)

    return ReviewSchedule(
        repetition=repetition,
        interval=interval,
        ease_factor=ease_factor,
        last_revised_at=now,
        next_review_at=next_review_at,
        record=record,
    )


def prepend_revision(
    history: Iterable[RevisionRecord],
    record: RevisionRecord,
    limit: int = REVISION_HISTORY_LIMIT,
) -> Tuple[RevisionRecord, ...]:
    """Put ``record`` in front of ``history`` and keep only the newest ``limit`` entries."""
    bounded = deque(islice(history, limit), maxlen=limit)
    bounded.appendleft(record)
    return tuple(bounded)
