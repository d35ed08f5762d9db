from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from studyhub.curriculum.status import LCStatus, derive_status


NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "has_files,next_review_at,expected",
    [
        (False, None, LCStatus.NOT_UPLOADED),
        (False, NOW - timedelta(days=3), LCStatus.NOT_UPLOADED),
        (False, NOW + timedelta(days=3), LCStatus.NOT_UPLOADED),
        (True, None, LCStatus.UPLOADED),
        (True, NOW + timedelta(seconds=1), LCStatus.UPLOADED),
        (True, NOW, LCStatus.NEEDS_REVISION),
        (True, NOW - timedelta(days=10), LCStatus.NEEDS_REVISION),
    ],
)
def test_derive_status(has_files: bool, next_review_at, expected: LCStatus) -> None:
    assert derive_status(has_files, next_review_at, NOW) is expected


def test_naive_next_review_is_compared_as_utc() -> None:
    naive_due = datetime(2026, 3, 2, 9, 0)

    assert derive_status(True, naive_due, NOW) is LCStatus.NEEDS_REVISION


def test_status_defaults_to_current_time() -> None:
    past = datetime.now(timezone.utc) - timedelta(minutes=1)
    future = datetime.now(timezone.utc) + timedelta(days=1)

    assert derive_status(True, past) is LCStatus.NEEDS_REVISION
    assert derive_status(True, future) is LCStatus.UPLOADED


def test_status_values_match_persisted_names() -> None:
    assert [status.value for status in LCStatus] == ["NOT_UPLOADED", "UPLOADED", "NEEDS_REVISION"]
