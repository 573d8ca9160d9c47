"""Tests for config module."""

import logging

import pytest

from tickminder.config import Settings, load_settings

_VARS = (
    "TICKMINDER_SHOW_NOTIFICATIONS",
    "TICKMINDER_PAUSE_ON_TRIGGER",
    "TICKMINDER_ENABLE_NORMAL_ALERTS",
    "TICKMINDER_ENABLE_CONDITION_ALERTS",
    "TICKMINDER_AUTO_CONDITION_REMINDERS",
    "TICKMINDER_AUTO_EVENT_REMINDERS",
    "TICKMINDER_REMOVE_ON_IMMUNITY",
    "TICKMINDER_SAMPLE_INTERVAL",
    "TICKMINDER_CONDITION_SCAN_INTERVAL",
    "TICKMINDER_EVENT_SCAN_INTERVAL",
    "TICKMINDER_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert load_settings() == Settings()


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TICKMINDER_PAUSE_ON_TRIGGER", "yes")
    monkeypatch.setenv("TICKMINDER_SHOW_NOTIFICATIONS", "off")
    monkeypatch.setenv("TICKMINDER_SAMPLE_INTERVAL", "250")
    monkeypatch.setenv("TICKMINDER_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.pause_on_trigger is True
    assert settings.show_notifications is False
    assert settings.sample_interval == 250
    assert settings.log_level == "DEBUG"


def test_bad_values_fall_back(monkeypatch, caplog):
    monkeypatch.setenv("TICKMINDER_REMOVE_ON_IMMUNITY", "maybe")
    monkeypatch.setenv("TICKMINDER_EVENT_SCAN_INTERVAL", "often")
    monkeypatch.setenv("TICKMINDER_CONDITION_SCAN_INTERVAL", "0")
    monkeypatch.setenv("TICKMINDER_LOG_LEVEL", "chatty")

    with caplog.at_level(logging.WARNING):
        settings = load_settings()

    assert settings.remove_on_immunity is True
    assert settings.event_scan_interval == 600
    assert settings.condition_scan_interval == 60
    assert settings.log_level == "INFO"
    assert caplog.text.count("Ignoring") == 4
