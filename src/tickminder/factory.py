"""Construction of reminders with one-monitor-per-target merge semantics."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tickminder.errors import ReminderStateError
from tickminder.reminders import (
    ConditionMonitorReminder,
    EventMonitorReminder,
    Frequency,
    SimpleReminder,
)

if TYPE_CHECKING:
    from tickminder.host import Condition, EventDefinition, MonitoredEntity
    from tickminder.manager import ReminderManager
    from tickminder.session import Session

log = logging.getLogger(__name__)


class ReminderFactory:
    def __init__(self, manager: ReminderManager) -> None:
        self.manager = manager

    @property
    def session(self) -> Session:
        return self.manager.session

    def create_condition_monitor(
        self,
        entity: MonitoredEntity,
        condition: Condition,
        *,
        remove_on_immunity: bool | None = None,
    ) -> ConditionMonitorReminder:
        """Monitor ``condition`` on ``entity``, merging into an existing monitor.

        An entity never gets a second condition monitor: when one exists the
        condition joins its tracked set and the existing reminder is returned.
        """
        existing = self.manager.find_condition_monitor(entity.id)
        if existing is not None:
            if existing.track(condition):
                log.debug("Merged %s into monitor %s for %s", condition.label, existing.id, entity.label)
            return existing

        if remove_on_immunity is None:
            remove_on_immunity = self.session.settings.remove_on_immunity
        reminder = ConditionMonitorReminder.new(
            self.session, entity, condition, remove_on_immunity=remove_on_immunity
        )
        self.manager.add_reminder(reminder)
        log.debug("Created monitor %s for %s's %s", reminder.id, entity.label, condition.label)
        return reminder

    def create_event_monitor(self, event: EventDefinition) -> EventMonitorReminder:
        existing = self.manager.find_event_monitor(event.group_id, event.def_name)
        if existing is not None:
            return existing
        reminder = EventMonitorReminder.new(self.session, event)
        self.manager.add_reminder(reminder)
        log.debug("Created event monitor %s for %s", reminder.id, event.label)
        return reminder

    def create_simple(
        self,
        label: str,
        description: str = "",
        *,
        trigger_tick: int,
        frequency: Frequency = Frequency.ONE_TIME,
        recurrence_interval: int = 0,
    ) -> SimpleReminder:
        if frequency is Frequency.CUSTOM_INTERVAL and recurrence_interval <= 0:
            raise ReminderStateError(
                f"Custom interval must be positive, got {recurrence_interval}"
            )
        reminder = SimpleReminder.new(
            self.session,
            label,
            description,
            trigger_tick=trigger_tick,
            frequency=frequency,
            recurrence_interval=recurrence_interval,
        )
        self.manager.add_reminder(reminder)
        return reminder
