import logging
from collections import deque
from typing import List, Tuple

import pytest

from studyhub.app.runtime import summarize
from studyhub.app.settings import AppSettings
from studyhub.db import DEFAULT_DATABASE_URL, get_database_url, run_migrations_if_needed


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("APP_NAME", "APP_ENV", "LOG_LEVEL", "STORAGE_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings.from_env()

    assert settings.app_name == "FocusStudy"
    assert settings.app_env == "development"
    assert settings.log_level == "INFO"
    assert settings.storage_key == "current_session"


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("STORAGE_KEY", " exam_prep ")

    settings = AppSettings.from_env()

    assert settings.app_env == "production"
    assert settings.log_level == "DEBUG"
    assert settings.storage_key == "exam_prep"


def test_settings_reject_blank_storage_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_KEY", "   ")

    with pytest.raises(RuntimeError):
        AppSettings.from_env()


def test_run_migrations_if_needed_invokes_upgrade(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Tuple[object, str]] = []

    def fake_upgrade(config: object, target: str) -> None:
        calls.append((config, target))

    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "true")
    monkeypatch.setattr("studyhub.db.command.upgrade", fake_upgrade)

    run_migrations_if_needed()

    assert calls and calls[0][1] == "head"


def test_run_migrations_if_needed_skips_when_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "false")

    calls: deque[str] = deque()

    def fake_upgrade(_: object, target: str) -> None:
        calls.append(target)

    monkeypatch.setattr("studyhub.db.command.upgrade", fake_upgrade)

    run_migrations_if_needed()

    assert not calls


@pytest.mark.asyncio
async def test_summarize_logs_progress(store, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="studyhub.app.runtime"):
        await summarize(store)

    messages = [record.getMessage() for record in caplog.records if record.name == "studyhub.app.runtime"]
    assert messages[0] == "0/40 concepts have materials; 0 need revision."
    assert "Unit 1 (Foundations of Computer Science): 0% uploaded, 0 due." in messages


def test_database_url_defaults_to_local_sqlite(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    assert get_database_url() == DEFAULT_DATABASE_URL


def test_database_url_expands_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STUDY_DB_DIR", "/var/lib/focus")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///${STUDY_DB_DIR}/study.db")

    assert get_database_url() == "sqlite+aiosqlite:////var/lib/focus/study.db"
