#!/usr/bin/env python3
"""Tests for environment-driven settings."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from fleet.settings import Settings, resolve_timezone


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("APP_TZ", "FLEET_DATA_FILE", "SENT_LOG_FILE", "SECRET_KEY", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.app_tz == "Asia/Kuala_Lumpur"
        assert settings.fleet_data_file == Path("data/fleet.yaml")
        assert settings.sent_log_file == Path("data/notification_logs.yaml")
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("APP_TZ", "UTC")
        monkeypatch.setenv("FLEET_DATA_FILE", "/srv/fleet.yaml")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.app_tz == "UTC"
        assert settings.fleet_data_file == Path("/srv/fleet.yaml")
        assert settings.log_level == "DEBUG"

    def test_timezone_resolved(self):
        zone = Settings().timezone
        assert zone.utcoffset(datetime(2024, 1, 1)) == timedelta(hours=8)

    def test_unknown_timezone(self):
        with pytest.raises(ValueError):
            resolve_timezone("Mars/Olympus")
