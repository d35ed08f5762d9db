"""Configuration helpers for the FocusStudy runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass

from studyhub.curriculum.constants import DEFAULT_STORAGE_KEY


DEFAULT_APP_NAME = "FocusStudy"


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    storage_key: str

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", DEFAULT_APP_NAME)
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        storage_key = os.getenv("STORAGE_KEY", DEFAULT_STORAGE_KEY).strip()

        if not storage_key:
            raise RuntimeError("STORAGE_KEY must not be empty.")
        if len(storage_key) > 64:
            raise RuntimeError("STORAGE_KEY must be at most 64 characters long.")

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            storage_key=storage_key,
        )
