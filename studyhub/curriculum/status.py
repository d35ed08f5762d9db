"""Derivation of a learning concept's display status."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from studyhub.curriculum.timeutils import ensure_aware, utcnow


class LCStatus(str, Enum):
    """Lifecycle status shown for a learning concept."""

    NOT_UPLOADED = "NOT_UPLOADED"
    UPLOADED = "UPLOADED"
    NEEDS_REVISION = "NEEDS_REVISION"


def derive_status(
    has_files: bool,
    next_review_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> LCStatus:
    """Return the status implied by attached materials and the review schedule.

    A concept without files is never due. A concept that has files but has not
    been scheduled yet counts as uploaded; once scheduled it needs revision as
    soon as ``next_review_at`` is no longer in the future.
    """
    if not has_files:
        return LCStatus.NOT_UPLOADED
    if next_review_at is None:
        return LCStatus.UPLOADED
    if now is None:
        now = utcnow()
    if ensure_aware(next_review_at) > ensure_aware(now):
        return LCStatus.UPLOADED
    return LCStatus.NEEDS_REVISION
