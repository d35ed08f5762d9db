"""Bootstrap logic for running the study tracker core."""

from __future__ import annotations

import asyncio
import logging

from studyhub.app.settings import AppSettings
from studyhub.curriculum.store import ConceptStore
from studyhub.db import get_engine, get_session_factory, run_migrations_if_needed
from studyhub.db.app_data import SqlBlobStore


LOGGER = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


def build_store(settings: AppSettings) -> ConceptStore:
    """Wire the concept store to the configured database."""
    return ConceptStore(SqlBlobStore(get_session_factory()), storage_key=settings.storage_key)


async def summarize(store: ConceptStore) -> None:
    """Load the curriculum and log where the learner stands."""
    stats = await store.get_stats()
    LOGGER.info(
        "%s/%s concepts have materials; %s need revision.",
        stats.uploaded_count,
        stats.total_concepts,
        stats.needs_revision_count,
    )
    for progress in await store.unit_progress():
        LOGGER.info(
            "Unit %s (%s): %.0f%% uploaded, %s due.",
            progress.unit.order,
            progress.unit.title,
            progress.percent_uploaded,
            progress.needs_revision_count,
        )


async def _load_session(settings: AppSettings) -> None:
    store = build_store(settings)
    try:
        await summarize(store)
    finally:
        await get_engine().dispose()


def run_app(settings: AppSettings) -> None:
    """Prepare the database and load the study session described by ``settings``."""
    _configure_logging(settings.log_level)
    print(f"{settings.app_name} is running in {settings.app_env} mode.")

    try:
        run_migrations_if_needed()
    except Exception:
        LOGGER.exception("Database migrations failed. Aborting startup.")
        raise

    LOGGER.info("Loading study session %s.", settings.storage_key)
    asyncio.run(_load_session(settings))
