"""Concept store: owns the curriculum and applies scheduler results."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from studyhub.curriculum.constants import DEFAULT_STORAGE_KEY
from studyhub.curriculum.models import (
    AttachedFile,
    LearningConcept,
    StudyStats,
    Unit,
    UnitProgress,
    build_initial_curriculum,
    dump_aggregate,
    load_aggregate,
    new_link,
)
from studyhub.curriculum.srs import review, validate_quality
from studyhub.curriculum.status import LCStatus
from studyhub.curriculum.timeutils import ensure_aware, utcnow
from studyhub.errors import ConceptNotFoundError


LOGGER = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class BlobStore(Protocol):
    """Minimal key-value persistence the store depends on."""

    async def load(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    async def save(self, key: str, payload: Dict[str, Any]) -> None:
        ...


class ConceptStore:
    """Hold units and learning concepts, persisting them as one aggregate.

    Every mutation of a concept runs under that concept's lock, so concurrent
    operations on the same concept never interleave. Persisting the aggregate
    is serialized by a store-wide write lock, and the in-memory copy is only
    replaced once the blob has been saved.
    """

    def __init__(self, blob_store: BlobStore, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        self._blob_store = blob_store
        self._storage_key = storage_key
        self._units: List[Unit] = []
        self._concepts: Dict[str, LearningConcept] = {}
        self._loaded = False
        self._load_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._concept_locks: Dict[str, asyncio.Lock] = {}

    async def load(self) -> None:
        """Load the aggregate, seeding and saving the default curriculum on first run."""
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            payload = await self._blob_store.load(self._storage_key)
            if payload is None:
                units, concepts = build_initial_curriculum()
                await self._blob_store.save(self._storage_key, dump_aggregate(units, concepts))
                LOGGER.info(
                    "Initialized curriculum with %s units and %s concepts.", len(units), len(concepts)
                )
            else:
                units, concepts = load_aggregate(payload)
                LOGGER.info("Loaded %s concepts from storage key %s.", len(concepts), self._storage_key)
            self._units = sorted(units, key=lambda unit: unit.order)
            self._concepts = {concept.id: concept for concept in concepts}
            self._loaded = True

    async def list_units(self) -> List[Unit]:
        await self.load()
        return list(self._units)

    async def list_concepts(
        self,
        unit_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[LearningConcept]:
        """Return concepts, optionally for one unit, with status derived against ``now``."""
        await self.load()
        if now is None:
            now = utcnow()
        concepts = [concept.with_derived_status(now) for concept in self._concepts.values()]
        if unit_id is not None:
            concepts = [concept for concept in concepts if concept.unit_id == unit_id]
        return concepts

    async def get_concept(self, concept_id: str, now: Optional[datetime] = None) -> LearningConcept:
        await self.load()
        return self._require(concept_id).with_derived_status(now)

    async def review_concept(
        self,
        concept_id: str,
        quality: int,
        now: Optional[datetime] = None,
    ) -> LearningConcept:
        """Record a review of ``concept_id`` and persist the new schedule."""
        validate_quality(quality)
        await self.load()
        self._require(concept_id)
        async with self._lock_for(concept_id):
            concept = self._require(concept_id)
            schedule = review(concept.schedule_state, quality, now)
            updated = concept.with_review(schedule)
            await self._commit(updated)
        LOGGER.info(
            "Concept %s reviewed with quality %s; next review in %s day(s).",
            concept_id,
            quality,
            schedule.interval,
        )
        return updated

    async def attach_files(
        self,
        concept_id: str,
        files: Sequence[AttachedFile],
        now: Optional[datetime] = None,
    ) -> LearningConcept:
        """Append study materials to a concept."""
        await self.load()
        self._require(concept_id)
        async with self._lock_for(concept_id):
            concept = self._require(concept_id)
            updated = concept.with_files((*concept.files, *files), now)
            await self._commit(updated)
        LOGGER.debug("Attached %s file(s) to concept %s.", len(files), concept_id)
        return updated

    async def attach_file(
        self,
        concept_id: str,
        file: AttachedFile,
        now: Optional[datetime] = None,
    ) -> LearningConcept:
        return await self.attach_files(concept_id, [file], now)

    async def add_link(
        self,
        concept_id: str,
        title: str,
        url: str,
        now: Optional[datetime] = None,
    ) -> LearningConcept:
        """Attach a URL resource to a concept."""
        return await self.attach_file(concept_id, new_link(title, url, now), now)

    async def remove_file(
        self,
        concept_id: str,
        file_id: str,
        now: Optional[datetime] = None,
    ) -> LearningConcept:
        """Detach a file; the concept falls back to NOT_UPLOADED when none remain."""
        await self.load()
        self._require(concept_id)
        async with self._lock_for(concept_id):
            concept = self._require(concept_id)
            remaining = [item for item in concept.files if item.id != file_id]
            if len(remaining) == len(concept.files):
                LOGGER.debug("File %s is not attached to concept %s.", file_id, concept_id)
                return concept.with_derived_status(now)
            updated = concept.with_files(remaining, now)
            await self._commit(updated)
        LOGGER.debug("Removed file %s from concept %s.", file_id, concept_id)
        return updated

    async def get_stats(self, now: Optional[datetime] = None) -> StudyStats:
        units = await self.list_units()
        concepts = await self.list_concepts(now=now)
        uploaded = sum(1 for concept in concepts if concept.status is not LCStatus.NOT_UPLOADED)
        return StudyStats(
            total_units=len(units),
            total_concepts=len(concepts),
            uploaded_count=uploaded,
            remaining_count=len(concepts) - uploaded,
            needs_revision_count=_count_status(concepts, LCStatus.NEEDS_REVISION),
        )

    async def recent_concepts(self, limit: int = 5, now: Optional[datetime] = None) -> List[LearningConcept]:
        """Concepts with materials, most recently revised or uploaded first."""
        concepts = await self.list_concepts(now=now)
        active = [concept for concept in concepts if concept.status is not LCStatus.NOT_UPLOADED]
        active.sort(key=_last_touched_at, reverse=True)
        return active[:limit]

    async def unit_progress(self, now: Optional[datetime] = None) -> List[UnitProgress]:
        units = await self.list_units()
        concepts = await self.list_concepts(now=now)
        progress: List[UnitProgress] = []
        for unit in units:
            unit_concepts = [concept for concept in concepts if concept.unit_id == unit.id]
            progress.append(
                UnitProgress(
                    unit=unit,
                    concept_count=len(unit_concepts),
                    uploaded_count=len(unit_concepts) - _count_status(unit_concepts, LCStatus.NOT_UPLOADED),
                    needs_revision_count=_count_status(unit_concepts, LCStatus.NEEDS_REVISION),
                )
            )
        return progress

    def _require(self, concept_id: str) -> LearningConcept:
        concept = self._concepts.get(concept_id)
        if concept is None:
            raise ConceptNotFoundError(concept_id)
        return concept

    def _lock_for(self, concept_id: str) -> asyncio.Lock:
        lock = self._concept_locks.get(concept_id)
        if lock is None:
            lock = asyncio.Lock()
            self._concept_locks[concept_id] = lock
        return lock

    async def _commit(self, concept: LearningConcept) -> None:
        async with self._write_lock:
            concepts = dict(self._concepts)
            concepts[concept.id] = concept
            await self._blob_store.save(self._storage_key, dump_aggregate(self._units, concepts.values()))
            self._concepts = concepts


def _count_status(concepts: Iterable[LearningConcept], status: LCStatus) -> int:
    return sum(1 for concept in concepts if concept.status is status)


def _last_touched_at(concept: LearningConcept) -> datetime:
    if concept.last_revised_at is not None:
        return ensure_aware(concept.last_revised_at)
    if concept.files:
        return ensure_aware(concept.files[0].uploaded_at)
    return _EPOCH
