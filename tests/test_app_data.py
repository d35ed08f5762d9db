from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from studyhub.db.app_data import SqlBlobStore, load_payload, save_payload
from studyhub.errors import StorageUnavailableError


@pytest.mark.asyncio
async def test_load_payload_returns_none_for_missing_key(session_factory) -> None:
    async with session_factory() as session:
        assert await load_payload(session, "current_session") is None


@pytest.mark.asyncio
async def test_save_payload_overwrites_existing_row(session_factory) -> None:
    created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    updated_at = created_at + timedelta(hours=2)

    async with session_factory() as session:
        async with session.begin():
            await save_payload(session, "current_session", {"units": [], "lcs": []}, now=created_at)
        async with session.begin():
            record = await save_payload(
                session, "current_session", {"units": [{"id": "u1"}], "lcs": []}, now=updated_at
            )

    assert record.payload == {"units": [{"id": "u1"}], "lcs": []}
    assert record.updated_at == updated_at

    async with session_factory() as session:
        stored = await load_payload(session, "current_session")
    assert stored == {"units": [{"id": "u1"}], "lcs": []}


@pytest.mark.asyncio
async def test_blob_store_round_trips_payload(session_factory) -> None:
    blobs = SqlBlobStore(session_factory)
    payload = {
        "units": [{"id": "u1", "title": "Foundations", "order": 1}],
        "lcs": [{"easeFactor": 2.2800000000000002}],
    }

    await blobs.save("current_session", payload)
    assert await blobs.load("current_session") == payload
    assert await blobs.load("other_session") is None


@pytest.mark.asyncio
async def test_blob_store_reports_missing_schema_as_unavailable() -> None:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    blobs = SqlBlobStore(async_sessionmaker(engine, expire_on_commit=False))
    try:
        with pytest.raises(StorageUnavailableError):
            await blobs.load("current_session")
        with pytest.raises(StorageUnavailableError):
            await blobs.save("current_session", {"units": [], "lcs": []})
    finally:
        await engine.dispose()
