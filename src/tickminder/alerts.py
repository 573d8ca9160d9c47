"""Summary of due reminders for a host's alert area."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from tickminder.reminders import Reminder


@dataclass(frozen=True, slots=True)
class Alert:
    label: str
    explanation: str
    reminder_ids: tuple[str, ...]


def due_alert(reminders: Iterable[Reminder], now: int) -> Alert | None:
    """Build the alert for reminders due at ``now``; None when nothing is due."""
    due = [r for r in reminders if not r.finished and r.trigger_tick <= now]
    if not due:
        return None
    ids = tuple(r.id for r in due)
    if len(due) == 1:
        reminder = due[0]
        return Alert(
            label=f"Reminder due: {reminder.get_label()}",
            explanation=f"Reminder: {reminder.get_label()}\n\n{reminder.get_description()}",
            reminder_ids=ids,
        )
    lines = "".join(f"\n- {r.get_label()}" for r in due)
    return Alert(
        label="Multiple reminders due",
        explanation=f"Multiple reminders are due:\n{lines}",
        reminder_ids=ids,
    )
