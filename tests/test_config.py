"""Tests for environment-driven settings."""
import pytest
from pydantic import ValidationError

from matchday.config import AppSettings, get_settings, reset_settings_cache
from matchday.services import FileDurableStore, HttpDurableStore, create_durable_store


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_defaults(monkeypatch):
    for name in ("MATCHDAY_TEAM_ID", "MATCHDAY_DURABLE_BACKEND", "MATCHDAY_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = AppSettings(_env_file=None)
    assert settings.TEAM_ID == "default-team"
    assert settings.DURABLE_BACKEND == "file"
    assert settings.LOG_LEVEL == "INFO"
    assert settings.WEB_PORT == 7122


def test_environment_overrides_are_cached(monkeypatch):
    monkeypatch.setenv("MATCHDAY_TEAM_ID", "u12-blue")
    monkeypatch.setenv("MATCHDAY_LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.TEAM_ID == "u12-blue"
    assert settings.LOG_LEVEL == "DEBUG"

    monkeypatch.setenv("MATCHDAY_TEAM_ID", "u14-red")
    assert get_settings() is settings
    reset_settings_cache()
    assert get_settings().TEAM_ID == "u14-red"


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, LOG_LEVEL="chatty")
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, DURABLE_BACKEND="ftp")
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, DURABLE_BACKEND="http", DURABLE_URL="")


def test_durable_backend_selection(tmp_path):
    file_store = create_durable_store(AppSettings(_env_file=None, DATA_DIR=str(tmp_path)))
    assert isinstance(file_store, FileDurableStore)

    http_store = create_durable_store(AppSettings(
        _env_file=None, DURABLE_BACKEND="HTTP", DURABLE_URL="https://db.example.org/rest/v1",
        DURABLE_API_KEY="secret",
    ))
    assert isinstance(http_store, HttpDurableStore)
