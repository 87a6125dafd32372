"""Tests for environment-driven settings."""

import logging

from labor_engine.config import Settings, configure_logging


def test_defaults(monkeypatch):
    for key in ("WAGE_RATE_CACHE_TTL_SECONDS", "QUERY_TIMEOUT_SECONDS", "PORT", "DEBUG"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings.from_env()

    assert settings.wage_rate_cache_ttl_seconds == 300
    assert settings.query_timeout_seconds == 30
    assert settings.port == 8000
    assert settings.debug is False


def test_overrides(monkeypatch):
    monkeypatch.setenv("WAGE_RATE_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("QUERY_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("DEBUG", "TRUE")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.wage_rate_cache_ttl_seconds == 60
    assert settings.query_timeout_seconds == 2.5
    assert settings.debug is True
    assert settings.log_level == "DEBUG"


def test_configure_logging_applies_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging(Settings.from_env())

    assert calls[0]["level"] == logging.ERROR
