"""Live reminder collection for one simulation session.

The manager is the only owner of the reminder list. Callers get copies from
``get_active`` and route every mutation through the methods here. ``tick`` is
called once per simulation tick and does real work only every
``sample_interval`` ticks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

from tickminder import storage
from tickminder.reminders import (
    REMINDER_KINDS,
    ConditionMonitorReminder,
    EventMonitorReminder,
    Reminder,
    reminder_from_dict,
)

if TYPE_CHECKING:
    from tickminder.session import Session

log = logging.getLogger(__name__)

ReminderFilter = Union[str, type[Reminder], Callable[[Reminder], bool], None]


def _matches(reminder: Reminder, kind: ReminderFilter) -> bool:
    if kind is None:
        return True
    if isinstance(kind, str):
        return reminder.kind == kind
    if isinstance(kind, type):
        return isinstance(reminder, kind)
    return bool(kind(reminder))


class ReminderManager:
    def __init__(self, session: Session) -> None:
        self.session = session
        self._reminders: list[Reminder] | None = None
        self._listeners: list[Callable[[], None]] = []
        self._dedup_pending = False
        self._last_sweep: int | None = None

    # --- Lifecycle ---

    @property
    def started(self) -> bool:
        return self._reminders is not None

    def start(self) -> None:
        if self._reminders is None:
            self._reminders = []
        self._last_sweep = None

    def shutdown(self) -> None:
        self._reminders = None
        self._listeners.clear()
        self._dedup_pending = False
        self._last_sweep = None

    def __len__(self) -> int:
        return len(self._reminders or [])

    # --- Change listeners ---

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run after the collection changes; returns an unsubscriber."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _changed(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                log.exception("Reminder change listener failed")

    # --- Mutations ---

    def add_reminder(self, reminder: Reminder | None) -> None:
        if self._reminders is None:
            log.error("Cannot add reminder: manager not started")
            return
        if reminder is None:
            log.error("Attempted to add a null reminder")
            return
        if any(r.id == reminder.id for r in self._reminders):
            log.debug("Reminder %s already registered", reminder.id)
            return
        self._reminders.append(reminder)
        if isinstance(reminder, ConditionMonitorReminder):
            self._dedup_pending = True
        self._changed()

    def _discard(self, reminder: Reminder) -> bool:
        if self._reminders is None:
            return False
        for index, existing in enumerate(self._reminders):
            if existing is reminder:
                del self._reminders[index]
                return True
        return False

    def _remove_where(self, predicate: Callable[[Reminder], bool]) -> int:
        if not self._reminders:
            return 0
        before = len(self._reminders)
        # In-place so a sweep iterating by index sees the shorter list
        self._reminders[:] = [r for r in self._reminders if not predicate(r)]
        removed = before - len(self._reminders)
        if removed:
            self._changed()
        return removed

    def remove_reminder(self, reminder_id: str) -> None:
        if not reminder_id:
            return
        if not self._remove_where(lambda r: r.id == reminder_id):
            log.debug("No reminder with id %s to remove", reminder_id)

    def remove_for_entity(self, entity_id: str) -> None:
        if not entity_id:
            return
        removed = self._remove_where(
            lambda r: isinstance(r, ConditionMonitorReminder) and r.entity_id == entity_id
        )
        if removed:
            log.debug("Removed %d monitor(s) for %s", removed, entity_id)

    # --- Read views ---

    def get(self, reminder_id: str) -> Reminder | None:
        return next((r for r in self._reminders or [] if r.id == reminder_id), None)

    def get_active(self, kind: ReminderFilter = None, *, refresh: bool = False) -> list[Reminder]:
        """Snapshot of unfinished reminders, optionally filtered by kind.

        With ``refresh`` the display state of each returned reminder is brought
        up to date for the current tick; scheduling state is never touched.
        """
        active = [r for r in self._reminders or [] if not r.finished and _matches(r, kind)]
        if refresh:
            for reminder in active:
                reminder.provider.ensure_fresh()
        return active

    def condition_monitors(self) -> list[ConditionMonitorReminder]:
        return [r for r in self.get_active(ConditionMonitorReminder) if isinstance(r, ConditionMonitorReminder)]

    def find_condition_monitor(self, entity_id: str) -> ConditionMonitorReminder | None:
        return next((r for r in self.condition_monitors() if r.entity_id == entity_id), None)

    def find_event_monitor(self, group_id: str, def_name: str) -> EventMonitorReminder | None:
        for reminder in self.get_active(EventMonitorReminder):
            if (
                isinstance(reminder, EventMonitorReminder)
                and reminder.group_id == group_id
                and reminder.def_name == def_name
            ):
                return reminder
        return None

    def due_reminders(self) -> list[Reminder]:
        return [r for r in self.get_active() if r.is_due()]

    # --- Tick loop ---

    def tick(self) -> None:
        if self._reminders is None:
            return
        if self._dedup_pending:
            self.dedupe_condition_monitors()
        now = self.session.now()
        interval = self.session.settings.sample_interval
        # Elapsed-time check tolerates skipped ticks; a negative delta means rollback
        if self._last_sweep is not None and 0 <= now - self._last_sweep < interval:
            return
        self._last_sweep = now
        self.sweep()

    def sweep(self) -> int:
        """Trigger every due reminder and drop finished ones; returns triggers run."""
        reminders = self._reminders
        if reminders is None:
            return 0
        self.dedupe_condition_monitors()
        now = self.session.now()
        triggered = 0
        changed = False

        for index in range(len(reminders) - 1, -1, -1):
            if index >= len(reminders):
                continue
            reminder = reminders[index]
            try:
                if reminder.finished:
                    self._discard(reminder)
                    changed = True
                    continue
                if now < reminder.trigger_tick:
                    continue
                reminder.trigger()
                triggered += 1
                changed = True
                if reminder.completed:
                    self._discard(reminder)
            except Exception:
                log.exception("Dropping reminder %s after a failed trigger", reminder.id)
                self._discard(reminder)
                changed = True

        if changed:
            self._changed()
        return triggered

    def dedupe_condition_monitors(self) -> int:
        """Collapse monitors sharing an entity into the one tracking the most ids."""
        self._dedup_pending = False
        if not self._reminders:
            return 0
        groups: dict[str, list[ConditionMonitorReminder]] = {}
        for reminder in self._reminders:
            if isinstance(reminder, ConditionMonitorReminder) and not reminder.finished:
                groups.setdefault(reminder.entity_id, []).append(reminder)

        removed = 0
        for entity_id, group in groups.items():
            if len(group) < 2 or not entity_id:
                continue
            keeper = max(group, key=lambda r: len(r.provider.tracked_ids))
            for duplicate in group:
                if duplicate is keeper:
                    continue
                keeper.merge_tracked(duplicate.provider.tracked_ids)
                self._discard(duplicate)
                removed += 1
            log.info("Collapsed %d duplicate monitor(s) for %s", len(group) - 1, entity_id)

        if removed:
            self._changed()
        return removed

    def update_for_entity(self, entity_id: str) -> None:
        """Refresh an entity's monitors after the host reports a change to it."""
        monitors = [r for r in self.condition_monitors() if r.entity_id == entity_id]
        for monitor in monitors:
            try:
                monitor.refresh()
            except Exception:
                log.exception("Failed to refresh monitor %s", monitor.id)
                continue
            if monitor.provider.obsolete:
                monitor.completed = True
        if monitors:
            self._changed()

    # --- Persistence ---

    def to_records(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self._reminders or []]

    def load_records(self, records: Iterable[dict[str, Any]]) -> None:
        """Replace the collection with saved records, then prune and dedupe."""
        loaded: list[Reminder] = []
        for record in records:
            if not isinstance(record, dict):
                log.warning("Skipping reminder record that is not a mapping")
                continue
            try:
                loaded.append(reminder_from_dict(self.session, record))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                log.warning("Skipping corrupt reminder record %r: %s", record.get("id"), exc)
        self._reminders = loaded
        self._last_sweep = None
        self._post_load()

    def _post_load(self) -> None:
        assert self._reminders is not None
        before = len(self._reminders)
        self._reminders[:] = [r for r in self._reminders if not r.finished]
        pruned = before - len(self._reminders)
        if pruned:
            log.info("Pruned %d finished reminder(s) on load", pruned)
        self.dedupe_condition_monitors()
        for reminder in self._reminders:
            log.debug(
                "Loaded %s reminder %s: frequency=%s created=%d last=%d trigger=%d",
                reminder.kind,
                reminder.id,
                reminder.frequency.value,
                reminder.created_tick,
                reminder.last_trigger_tick,
                reminder.trigger_tick,
            )
        self._changed()

    def save(self, path: Path | None = None) -> Path:
        target = path or storage.SAVE_FILE
        storage.write_records(target, self.to_records())
        return target

    def load(self, path: Path | None = None) -> None:
        self.load_records(storage.read_records(path or storage.SAVE_FILE))

    def kinds(self) -> dict[str, int]:
        """Count of active reminders per kind, for status displays."""
        counts = dict.fromkeys(REMINDER_KINDS, 0)
        for reminder in self.get_active():
            counts[reminder.kind] = counts.get(reminder.kind, 0) + 1
        return counts
