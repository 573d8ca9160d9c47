"""Per-simulation-session context shared by the manager and its reminders."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tickminder.config import Settings, load_settings
from tickminder.host import (
    Clock,
    ConditionPolicy,
    EntityResolver,
    EventSource,
    NotificationSink,
    default_condition_policy,
)

log = logging.getLogger(__name__)


@dataclass(slots=True)
class Session:
    clock: Clock
    notifier: NotificationSink
    entities: EntityResolver | None = None
    events: EventSource | None = None
    condition_policy: ConditionPolicy = default_condition_policy
    settings: Settings = field(default_factory=load_settings)

    def now(self) -> int:
        return self.clock.current_tick()

    def notify(self, title: str, body: str) -> bool:
        """Send a notification; returns whether the sink accepted it.

        Sink errors are logged and swallowed so they never touch reminder state.
        """
        if not self.settings.show_notifications:
            return False
        try:
            self.notifier.notify(title, body, pause=self.settings.pause_on_trigger)
        except Exception:
            log.exception("Notification sink failed for %r", title)
            return False
        return True
