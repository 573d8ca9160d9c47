"""User-configurable values loaded from environment variables."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


@dataclass(frozen=True, slots=True)
class Settings:
    show_notifications: bool = True
    pause_on_trigger: bool = False
    enable_normal_alerts: bool = True
    enable_condition_alerts: bool = True
    auto_create_condition_reminders: bool = True
    auto_create_event_reminders: bool = True
    remove_on_immunity: bool = True
    sample_interval: int = 300  # ticks between manager sweeps
    condition_scan_interval: int = 60
    event_scan_interval: int = 600
    log_level: str = "INFO"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    log.warning("Ignoring %s=%r: expected a boolean", name, raw)
    return default


def _env_interval(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("Ignoring %s=%r: expected an integer", name, raw)
        return default
    if value < 1:
        log.warning("Ignoring %s=%r: interval must be at least 1 tick", name, raw)
        return default
    return value


_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_level(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().upper()
    if value not in _LEVELS:
        log.warning("Ignoring %s=%r: expected one of %s", name, raw, ", ".join(_LEVELS))
        return default
    return value


def load_settings() -> Settings:
    """Build Settings from TICKMINDER_* env vars, falling back to defaults."""
    return Settings(
        show_notifications=_env_bool("TICKMINDER_SHOW_NOTIFICATIONS", True),
        pause_on_trigger=_env_bool("TICKMINDER_PAUSE_ON_TRIGGER", False),
        enable_normal_alerts=_env_bool("TICKMINDER_ENABLE_NORMAL_ALERTS", True),
        enable_condition_alerts=_env_bool("TICKMINDER_ENABLE_CONDITION_ALERTS", True),
        auto_create_condition_reminders=_env_bool(
            "TICKMINDER_AUTO_CONDITION_REMINDERS", True
        ),
        auto_create_event_reminders=_env_bool("TICKMINDER_AUTO_EVENT_REMINDERS", True),
        remove_on_immunity=_env_bool("TICKMINDER_REMOVE_ON_IMMUNITY", True),
        sample_interval=_env_interval("TICKMINDER_SAMPLE_INTERVAL", 300),
        condition_scan_interval=_env_interval("TICKMINDER_CONDITION_SCAN_INTERVAL", 60),
        event_scan_interval=_env_interval("TICKMINDER_EVENT_SCAN_INTERVAL", 600),
        log_level=_env_level("TICKMINDER_LOG_LEVEL", "INFO"),
    )
