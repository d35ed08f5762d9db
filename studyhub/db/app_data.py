"""Key-value persistence of the study session blob."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyhub.errors import StorageUnavailableError

from . import AppData


LOGGER = logging.getLogger(__name__)


async def load_payload(session: AsyncSession, key: str) -> Optional[Dict[str, Any]]:
    """Return the payload stored under ``key``, if any."""
    record = await session.get(AppData, key)
    if record is None:
        return None
    return record.payload


async def save_payload(
    session: AsyncSession,
    key: str,
    payload: Dict[str, Any],
    now: Optional[datetime] = None,
) -> AppData:
    """Insert or overwrite the payload stored under ``key``."""
    if now is None:
        now = datetime.now(timezone.utc)

    record = await session.get(AppData, key)
    if record is None:
        record = AppData(key=key, payload=payload, created_at=now, updated_at=now)
        session.add(record)
    else:
        record.payload = payload
        record.updated_at = now
    await session.flush()
    return record


class SqlBlobStore:
    """Stores whole aggregates as JSON rows keyed by a session key."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            async with self._session_factory() as session:
                return await load_payload(session, key)
        except SQLAlchemyError as exc:
            LOGGER.warning("Failed to load study data for key %s: %s", key, exc)
            raise StorageUnavailableError(f"Unable to load study data for key '{key}'.") from exc

    async def save(self, key: str, payload: Dict[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await save_payload(session, key, payload)
        except SQLAlchemyError as exc:
            LOGGER.warning("Failed to save study data for key %s: %s", key, exc)
            raise StorageUnavailableError(f"Unable to save study data for key '{key}'.") from exc
