"""Exceptions raised by the study-tracking core."""

from __future__ import annotations


class StudyHubError(Exception):
    """Base class for all errors surfaced by the study hub."""


class InvalidQualityError(StudyHubError, ValueError):
    """Raised when a review quality is not an integer between 0 and 5."""

    def __init__(self, quality: object) -> None:
        super().__init__(f"Review quality must be an integer between 0 and 5, got {quality!r}.")
        self.quality = quality


class ConceptNotFoundError(StudyHubError, LookupError):
    """Raised when an operation references an unknown learning concept."""

    def __init__(self, concept_id: str) -> None:
        super().__init__(f"Learning concept '{concept_id}' does not exist.")
        self.concept_id = concept_id


class StorageUnavailableError(StudyHubError):
    """Raised when the persistence collaborator cannot load or save data."""
