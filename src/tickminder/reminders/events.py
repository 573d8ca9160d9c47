"""Event-monitor reminders: eligibility of a recurring communal event."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tickminder.reminders.base import DataProvider, Frequency, Reminder, int_field
from tickminder.ticks import TICKS_PER_DAY, TICKS_PER_YEAR, clamp01

if TYPE_CHECKING:
    from tickminder.host import EventDefinition
    from tickminder.session import Session


def ticks_until_occurrence(event: EventDefinition, now: int) -> int | None:
    """Ticks to the next dated occurrence, rolling past dates forward a year."""
    if event.next_occurrence_tick is None:
        return None
    occurs = event.next_occurrence_tick
    if now > occurs:
        occurs += TICKS_PER_YEAR
    return occurs - now


class EventDataProvider(DataProvider):
    def __init__(
        self,
        session: Session,
        def_name: str,
        group_id: str,
        *,
        last_finished_tick: int = -1,
        anytime: bool = False,
        date_triggered: bool = False,
    ) -> None:
        super().__init__(session)
        self.def_name = def_name
        self.group_id = group_id
        self.last_finished_tick = last_finished_tick
        self.anytime = anytime
        self.date_triggered = date_triggered
        self.next_check_tick: int | None = None

    def find_event(self) -> EventDefinition | None:
        source = self.session.events
        if source is None or not self.def_name:
            return None
        return source.find(self.group_id, self.def_name)

    def _recompute(self) -> None:
        now = self.session.now()
        self.obsolete = False
        self.needs_attention = False
        self.progress = 0.0
        self.next_check_tick = None

        source = self.session.events
        event = self.find_event()
        if source is None or event is None:
            self.obsolete = True
            self.label = "Invalid event"
            self.description = "Event not found or unavailable."
            self.time_left = "N/A"
            return

        self.last_finished_tick = event.last_finished_tick
        self.anytime = event.anytime
        self.date_triggered = event.date_triggered
        self.label = event.label
        self.time_left = "Anytime" if event.anytime else "Scheduled"

        until = ticks_until_occurrence(event, now)
        if event.date_triggered and until is not None:
            self.next_check_tick = now + until
        else:
            self.next_check_tick = now + TICKS_PER_DAY

        reason = source.can_start(event)
        if reason is None:
            self.needs_attention = True
            self.progress = 1.0
            if event.anytime:
                prefix = "Anytime"
            elif event.date_triggered:
                prefix = "Available now"
            else:
                prefix = "Available"
            self.description = f"{prefix}\n{event.description}"
            return

        self.description = f"Not available: {reason}\n{event.description}"
        if event.anytime and event.repeat_penalty_active:
            self.progress = clamp01(event.repeat_penalty_progress)
        elif event.date_triggered and until is not None and until > 0:
            self.progress = 1.0 - clamp01(until / TICKS_PER_YEAR)

    def to_dict(self) -> dict[str, Any]:
        return {
            "def_name": self.def_name,
            "group_id": self.group_id,
            "last_finished_tick": self.last_finished_tick,
            "anytime": self.anytime,
            "date_triggered": self.date_triggered,
        }

    @classmethod
    def from_dict(cls, session: Session, data: dict[str, Any]) -> EventDataProvider:
        return cls(
            session,
            str(data["def_name"]),
            str(data.get("group_id") or ""),
            last_finished_tick=int_field(data, "last_finished_tick", -1),
            anytime=bool(data.get("anytime", False)),
            date_triggered=bool(data.get("date_triggered", False)),
        )

    @classmethod
    def blank(cls, session: Session) -> EventDataProvider:
        return cls(session, "", "")


class EventMonitorReminder(Reminder):
    kind = "event"
    provider_class = EventDataProvider
    default_frequency = Frequency.CUSTOM_INTERVAL
    provider: EventDataProvider

    @classmethod
    def new(cls, session: Session, event: EventDefinition) -> EventMonitorReminder:
        provider = EventDataProvider(
            session,
            event.def_name,
            event.group_id,
            last_finished_tick=event.last_finished_tick,
            anytime=event.anytime,
            date_triggered=event.date_triggered,
        )
        reminder = cls(session, provider, recurrence_interval=TICKS_PER_DAY)
        reminder.refresh()
        reminder.trigger_tick = reminder._next_event_tick(session.now())
        return reminder

    @property
    def def_name(self) -> str:
        return self.provider.def_name

    @property
    def group_id(self) -> str:
        return self.provider.group_id

    def _next_event_tick(self, now: int) -> int:
        check = self.provider.next_check_tick
        if check is None or check <= now:
            return now + TICKS_PER_DAY
        return check

    def _pending_notification(self) -> tuple[str, str] | None:
        if self.provider.obsolete:
            return None
        return f"Event reminder: {self.get_label()}", self.get_description()

    def reschedule_next(self) -> None:
        now = self.session.now()
        self.last_trigger_tick = now
        self.trigger_tick = self._next_event_tick(now)
