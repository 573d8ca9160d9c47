"""The single object a host session owns: manager, factory and watchers."""

from __future__ import annotations

import logging
from pathlib import Path

from tickminder.alerts import Alert, due_alert
from tickminder.factory import ReminderFactory
from tickminder.manager import ReminderManager
from tickminder.session import Session
from tickminder.watchers import ConditionWatcher, EventWatcher

log = logging.getLogger(__name__)


class ReminderEngine:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.manager = ReminderManager(session)
        self.factory = ReminderFactory(self.manager)
        self.condition_watcher = ConditionWatcher(self.manager, self.factory)
        self.event_watcher = EventWatcher(self.manager, self.factory)

    def start(self) -> None:
        self.manager.start()
        log.info("Reminder engine started at tick %d", self.session.now())

    def tick(self) -> None:
        """Advance one simulation tick: watchers first, then the manager sweep."""
        if not self.manager.started:
            return
        self.condition_watcher.tick()
        self.event_watcher.tick()
        self.manager.tick()

    def shutdown(self) -> None:
        self.manager.shutdown()
        self.condition_watcher.clear()
        self.event_watcher.clear()
        log.info("Reminder engine stopped")

    def save(self, path: Path | None = None) -> Path:
        target = self.manager.save(path)
        log.info("Saved %d reminder(s) to %s", len(self.manager), target)
        return target

    def load(self, path: Path | None = None) -> None:
        if not self.manager.started:
            self.manager.start()
        self.manager.load(path)
        self.condition_watcher.clear()
        self.event_watcher.clear()
        log.info("Loaded %d reminder(s)", len(self.manager))

    def alert(self) -> Alert | None:
        return due_alert(self.manager.get_active(), self.session.now())
