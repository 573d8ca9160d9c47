"""Periodic scanners that create reminders for conditions and events automatically.

Watchers only use the manager and factory public API. Their processed-key
sets live for one session and are deliberately not saved, so a reload
re-scans everything once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from tickminder.host import needs_treatment

if TYPE_CHECKING:
    from tickminder.factory import ReminderFactory
    from tickminder.host import Condition, EventDefinition, MonitoredEntity
    from tickminder.manager import ReminderManager

log = logging.getLogger(__name__)

_EXCLUDED_EVENT_WORDS = ("trial", "funeral")


def default_event_filter(event: EventDefinition) -> bool:
    """Skip one-off events that are not worth a standing reminder."""
    text = f"{event.def_name} {event.label}".lower()
    return not any(word in text for word in _EXCLUDED_EVENT_WORDS)


def _condition_marker(entity: MonitoredEntity, condition: Condition) -> str:
    return f"{entity.id}|{condition.def_name}|{condition.part or 'null'}"


class ConditionWatcher:
    def __init__(self, manager: ReminderManager, factory: ReminderFactory) -> None:
        self.manager = manager
        self.factory = factory
        self.processed: set[str] = set()

    def tick(self) -> int:
        session = self.manager.session
        settings = session.settings
        if session.now() % settings.condition_scan_interval != 0:
            return 0
        if not settings.auto_create_condition_reminders:
            return 0
        return self.scan()

    def scan(self) -> int:
        """Create or extend monitors for untracked conditions; returns how many."""
        session = self.manager.session
        if session.entities is None or not self.manager.started:
            return 0
        created = 0
        for entity in session.entities.monitored_entities():
            for condition in entity.conditions:
                marker = _condition_marker(entity, condition)
                if marker in self.processed:
                    continue
                if not needs_treatment(entity, condition, session.condition_policy):
                    continue
                self.factory.create_condition_monitor(entity, condition)
                log.debug("Auto-monitoring %s's %s", entity.label, condition.label)
                self.processed.add(marker)
                created += 1
        return created

    def clear(self) -> None:
        self.processed.clear()


class EventWatcher:
    def __init__(
        self,
        manager: ReminderManager,
        factory: ReminderFactory,
        eligible: Callable[[EventDefinition], bool] = default_event_filter,
    ) -> None:
        self.manager = manager
        self.factory = factory
        self.eligible = eligible
        self.processed: set[str] = set()

    def tick(self) -> int:
        session = self.manager.session
        settings = session.settings
        if session.now() % settings.event_scan_interval != 0:
            return 0
        if not settings.auto_create_event_reminders:
            return 0
        return self.scan()

    def scan(self) -> int:
        session = self.manager.session
        if session.events is None or not self.manager.started:
            return 0
        created = 0
        for event in session.events.definitions():
            marker = f"{event.group_id}|{event.def_name}"
            if marker in self.processed or not self.eligible(event):
                continue
            if self.manager.find_event_monitor(event.group_id, event.def_name) is None:
                self.factory.create_event_monitor(event)
                log.debug("Auto-monitoring event %s", event.label)
                created += 1
            self.processed.add(marker)
        return created

    def clear(self) -> None:
        self.processed.clear()
