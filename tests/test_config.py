"""Tests for settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from playground_engine.config import Settings, session_defaults


def test_session_defaults_from_settings(settings: Settings) -> None:
    defaults = session_defaults(settings)

    assert defaults.duration == timedelta(minutes=45)
    assert defaults.max_duration == timedelta(minutes=240)
    assert defaults.pool_affinity == "default"
    assert defaults.max_sessions_per_node == 1


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_TOKEN", "from-env")
    monkeypatch.setenv("SESSION_DEFAULT_MAX_PER_NODE", "3")
    monkeypatch.setenv("SESSION_MAX_DURATION", "60")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.admin_token == "from-env"
    assert settings.session_default_max_per_node == 3
    assert settings.log_level == "DEBUG"
    assert session_defaults(settings).max_duration == timedelta(minutes=60)


def test_settings_reject_non_positive_values() -> None:
    with pytest.raises(ValidationError):
        Settings(admin_token="admin-token", session_default_max_per_node=0)


def test_settings_reject_unknown_log_level() -> None:
    with pytest.raises(ValidationError):
        Settings(admin_token="admin-token", log_level="VERBOSE")
