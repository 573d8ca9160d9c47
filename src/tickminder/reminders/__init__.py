"""Reminder variants: simple, condition monitor and event monitor."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tickminder.reminders.base import DataProvider, Frequency, Reminder
from tickminder.reminders.conditions import (
    ConditionDataProvider,
    ConditionMonitorReminder,
    condition_key,
    most_urgent,
    resolve_condition,
    urgency_key,
)
from tickminder.reminders.events import EventDataProvider, EventMonitorReminder
from tickminder.reminders.simple import NoteDataProvider, SimpleReminder

if TYPE_CHECKING:
    from tickminder.session import Session

REMINDER_KINDS: dict[str, type[Reminder]] = {
    SimpleReminder.kind: SimpleReminder,
    ConditionMonitorReminder.kind: ConditionMonitorReminder,
    EventMonitorReminder.kind: EventMonitorReminder,
}


def reminder_from_dict(session: Session, data: dict[str, Any]) -> Reminder:
    """Dispatch a saved record to its variant; raises ValueError on unknown kinds."""
    kind = data.get("kind")
    cls = REMINDER_KINDS.get(str(kind))
    if cls is None:
        raise ValueError(f"Unknown reminder kind: {kind!r}")
    return cls.from_dict(session, data)


__all__ = [
    "REMINDER_KINDS",
    "ConditionDataProvider",
    "ConditionMonitorReminder",
    "DataProvider",
    "EventDataProvider",
    "EventMonitorReminder",
    "Frequency",
    "NoteDataProvider",
    "Reminder",
    "SimpleReminder",
    "condition_key",
    "most_urgent",
    "reminder_from_dict",
    "resolve_condition",
    "urgency_key",
]
