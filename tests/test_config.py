"""Settings.from_env: defaults, parsing, and clamping."""

from pathlib import Path

import pytest

from rapport.config import MIN_SYNC_INTERVAL_S, Settings
from rapport.domain import ReferenceFallback

_VARS = (
    "RAPPORT_STORAGE",
    "RAPPORT_STORAGE_DIR",
    "RAPPORT_STORAGE_NAME",
    "RAPPORT_SYNC_INTERVAL_S",
    "RAPPORT_SYNC_ENABLED",
    "RAPPORT_SAFE_MODE",
    "RAPPORT_DUE_FALLBACK",
    "RAPPORT_DETECTION_CHANCE",
    "RAPPORT_DETECTION_SEED",
    "RAPPORT_DETECTION_LATENCY_S",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings.from_env()
    assert settings.storage == "json"
    assert settings.sync_interval_s == 15 * 60
    assert settings.sync_enabled is True
    assert settings.safe_mode is False
    assert settings.due_fallback is ReferenceFallback.NONE
    assert settings.detection_chance == 0.3
    assert settings.detection_seed is None


def test_parses_values(monkeypatch) -> None:
    monkeypatch.setenv("RAPPORT_STORAGE", "Neo4j")
    monkeypatch.setenv("RAPPORT_STORAGE_DIR", "/tmp/rapport")
    monkeypatch.setenv("RAPPORT_SYNC_INTERVAL_S", "300")
    monkeypatch.setenv("RAPPORT_SYNC_ENABLED", "off")
    monkeypatch.setenv("RAPPORT_SAFE_MODE", "1")
    monkeypatch.setenv("RAPPORT_DUE_FALLBACK", "last_contacted")
    monkeypatch.setenv("RAPPORT_DETECTION_SEED", "42")
    monkeypatch.setenv("RAPPORT_DETECTION_LATENCY_S", "0")

    settings = Settings.from_env()
    assert settings.storage == "neo4j"
    assert settings.storage_dir == Path("/tmp/rapport")
    assert settings.sync_interval_s == 300
    assert settings.sync_enabled is False
    assert settings.safe_mode is True
    assert settings.due_fallback is ReferenceFallback.LAST_CONTACTED
    assert settings.detection_seed == 42
    assert settings.detection_latency_s == 0.0


def test_invalid_values_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("RAPPORT_STORAGE", "sqlite")
    monkeypatch.setenv("RAPPORT_SYNC_INTERVAL_S", "soon")
    monkeypatch.setenv("RAPPORT_DUE_FALLBACK", "yesterday")
    monkeypatch.setenv("RAPPORT_DETECTION_CHANCE", "2")
    monkeypatch.setenv("RAPPORT_DETECTION_SEED", "abc")

    settings = Settings.from_env()
    assert settings.storage == "json"
    assert settings.sync_interval_s == 15 * 60
    assert settings.due_fallback is ReferenceFallback.NONE
    assert settings.detection_chance == 0.3
    assert settings.detection_seed is None


def test_interval_clamped_to_minimum(monkeypatch) -> None:
    monkeypatch.setenv("RAPPORT_SYNC_INTERVAL_S", "5")
    assert Settings.from_env().sync_interval_s == MIN_SYNC_INTERVAL_S
