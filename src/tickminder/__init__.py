"""Tick-based reminders and condition monitors for simulation hosts."""

from tickminder.config import Settings, load_settings
from tickminder.engine import ReminderEngine
from tickminder.factory import ReminderFactory
from tickminder.host import Condition, EventDefinition, ManualClock, MonitoredEntity
from tickminder.manager import ReminderManager
from tickminder.session import Session

__all__ = [
    "Condition",
    "EventDefinition",
    "ManualClock",
    "MonitoredEntity",
    "ReminderEngine",
    "ReminderFactory",
    "ReminderManager",
    "Session",
    "Settings",
    "load_settings",
]
