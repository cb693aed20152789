"""Tests for environment-driven configuration."""
from datetime import date

import pytest

from timetable.config import DEFAULT_EPOCH, EngineConfig


def test_defaults(monkeypatch) -> None:
    for name in ("TIMETABLE_EPOCH", "TIMETABLE_TIMEZONE", "TIMETABLE_API_URL",
                 "TIMETABLE_AUX_API_URL", "TIMETABLE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    config = EngineConfig.from_env()

    assert config.epoch == DEFAULT_EPOCH
    assert config.epoch.weekday() == 0
    assert config.request_timeout == 30.0


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TIMETABLE_EPOCH", "2024-09-02")
    monkeypatch.setenv("TIMETABLE_API_URL", "https://example.test/v1/")
    monkeypatch.setenv("TIMETABLE_TIMEOUT", "5")

    config = EngineConfig.from_env()

    assert config.epoch == date(2024, 9, 2)
    assert config.api_base_url == "https://example.test/v1"
    assert config.request_timeout == 5.0


def test_epoch_must_be_monday() -> None:
    with pytest.raises(ValueError):
        EngineConfig(epoch=date(2024, 9, 3))
