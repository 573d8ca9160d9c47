"""Reminder entity and data-provider base types.

A Reminder owns scheduling state (ids, ticks, flags) and is what gets saved.
Its DataProvider owns everything recomputed from live host state: label,
description, time-left text, progress and the needs-attention flag. Providers
persist only identity (ids to resolve later), never the cached display values.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar
from uuid import uuid4

from tickminder.errors import ReminderStateError
from tickminder.ticks import (
    TICKS_PER_DAY,
    TICKS_PER_QUADRUM,
    TICKS_PER_YEAR,
    clamp01,
    format_ticks_left,
)

if TYPE_CHECKING:
    from tickminder.session import Session

log = logging.getLogger(__name__)


class Frequency(Enum):
    ONE_TIME = "one_time"
    FIXED_DAILY = "daily"
    FIXED_QUADRUM = "quadrum"
    FIXED_YEARLY = "yearly"
    CUSTOM_INTERVAL = "custom"
    CONDITION_DRIVEN = "condition"

    @property
    def display(self) -> str:
        return _FREQUENCY_DISPLAY[self]


_FREQUENCY_DISPLAY = {
    Frequency.ONE_TIME: "One Time",
    Frequency.FIXED_DAILY: "Days",
    Frequency.FIXED_QUADRUM: "Quadrums",
    Frequency.FIXED_YEARLY: "Years",
    Frequency.CUSTOM_INTERVAL: "Custom",
    Frequency.CONDITION_DRIVEN: "Tending",
}

_UNIT_TICKS = {
    Frequency.FIXED_DAILY: TICKS_PER_DAY,
    Frequency.FIXED_QUADRUM: TICKS_PER_QUADRUM,
    Frequency.FIXED_YEARLY: TICKS_PER_YEAR,
}


def int_field(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    return int(value)


class DataProvider:
    """Recomputes a reminder's display state from live host state.

    Subclasses implement ``_recompute`` and the identity (de)serialization.
    ``refresh`` is safe to call any number of times, including after the
    referenced host object has disappeared.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.label = ""
        self.description = ""
        self.time_left: str | None = None  # None: use the reminder's countdown
        self.progress: float | None = None  # None: use the reminder's window
        self.needs_attention = False
        self.obsolete = False  # target is gone for good; reminder should complete
        self.refreshed_at: int | None = None

    def _recompute(self) -> None:
        pass

    def refresh(self) -> None:
        self._recompute()
        self.refreshed_at = self.session.now()

    def ensure_fresh(self) -> None:
        """Refresh at most once per tick; used by the read accessors."""
        if self.refreshed_at != self.session.now():
            self.refresh()

    def to_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, session: Session, data: dict[str, Any]) -> DataProvider:
        return cls(session)

    @classmethod
    def blank(cls, session: Session) -> DataProvider:
        """Placeholder used when a saved provider cannot be reconstructed."""
        return cls(session)


class Reminder:
    kind: ClassVar[str] = ""
    provider_class: ClassVar[type[DataProvider]] = DataProvider
    default_frequency: ClassVar[Frequency] = Frequency.ONE_TIME

    def __init__(
        self,
        session: Session,
        provider: DataProvider,
        *,
        trigger_tick: int | None = None,
        frequency: Frequency | None = None,
        recurrence_interval: int = 0,
        id: str | None = None,
        created_tick: int | None = None,
        last_trigger_tick: int | None = None,
        completed: bool = False,
        dismissed: bool = False,
        label: str | None = None,
        description: str | None = None,
    ) -> None:
        now = session.now()
        self.session = session
        self.provider = provider
        self.id = id or uuid4().hex
        self.created_tick = now if created_tick is None else created_tick
        self.trigger_tick = now if trigger_tick is None else trigger_tick
        self.last_trigger_tick = (
            self.created_tick if last_trigger_tick is None else last_trigger_tick
        )
        self.frequency = frequency or self.default_frequency
        self.recurrence_interval = recurrence_interval
        self.completed = completed
        self.dismissed = dismissed
        # User edits take precedence over provider-computed text
        self.label_override = label or None
        self.description_override = description or None

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.id[:8]} {self.frequency.value} "
            f"trigger={self.trigger_tick}>"
        )

    @property
    def finished(self) -> bool:
        return self.completed or self.dismissed

    # --- State machine ---

    def refresh(self) -> None:
        self.provider.refresh()

    def _pending_notification(self) -> tuple[str, str] | None:
        """Title and body to send for this trigger, or None to stay quiet."""
        return f"Reminder: {self.get_label()}", self.get_description()

    def trigger(self) -> bool:
        """Fire the reminder; returns whether a notification went out."""
        if self.finished:
            return False
        self.refresh()

        notified = False
        message = self._pending_notification()
        if message is not None:
            notified = self.session.notify(*message)
        log.debug("Reminder triggered: %s (%s)", self.get_label(), self.id)

        if self.provider.obsolete or self.frequency is Frequency.ONE_TIME:
            self.completed = True
            return notified
        self.reschedule_next()
        return notified

    def _adaptive_next_tick(self, now: int) -> int:
        return now + TICKS_PER_DAY

    def reschedule_next(self) -> None:
        now = self.session.now()
        previous_window = self.trigger_tick - self.created_tick
        self.last_trigger_tick = now

        if self.frequency in _UNIT_TICKS:
            next_tick = now + _UNIT_TICKS[self.frequency]
        elif self.frequency is Frequency.CUSTOM_INTERVAL:
            if self.recurrence_interval > 0:
                interval = self.recurrence_interval
            elif previous_window > 0:
                interval = previous_window
            else:
                interval = TICKS_PER_DAY
            next_tick = now + interval
        elif self.frequency is Frequency.CONDITION_DRIVEN:
            next_tick = self._adaptive_next_tick(now)
        else:
            next_tick = self.trigger_tick
        self.trigger_tick = max(now, next_tick)

    def dismiss(self) -> None:
        self.dismissed = True

    # --- Read accessors ---

    def is_due(self) -> bool:
        return self.session.now() >= self.trigger_tick

    def window_progress(self) -> float:
        """Fraction of the current [last trigger, next trigger] window elapsed."""
        now = self.session.now()
        if now >= self.trigger_tick:
            return 1.0
        start = min(self.last_trigger_tick, now)
        span = self.trigger_tick - start
        if span <= 0:
            return 0.0
        return clamp01((now - start) / span)

    def get_label(self) -> str:
        if self.label_override:
            return self.label_override
        self.provider.ensure_fresh()
        return self.provider.label or "Unknown"

    def get_description(self) -> str:
        if self.description_override:
            return self.description_override
        self.provider.ensure_fresh()
        return self.provider.description or "No description"

    def get_time_left_string(self) -> str:
        self.provider.ensure_fresh()
        if self.provider.time_left is not None:
            return self.provider.time_left
        return format_ticks_left(self.trigger_tick - self.session.now())

    def get_progress(self) -> float:
        self.provider.ensure_fresh()
        if self.provider.progress is not None:
            return clamp01(self.provider.progress)
        return self.window_progress()

    def needs_attention(self) -> bool:
        self.provider.ensure_fresh()
        return self.provider.needs_attention

    # --- Edit flow ---

    def set_label(self, label: str | None) -> None:
        self.label_override = label or None

    def set_description(self, description: str | None) -> None:
        self.description_override = description or None

    def set_schedule(
        self,
        frequency: Frequency,
        *,
        recurrence_interval: int | None = None,
        trigger_tick: int | None = None,
    ) -> None:
        """Change the recurrence from an edit dialog and reschedule."""
        interval = (
            self.recurrence_interval if recurrence_interval is None else recurrence_interval
        )
        if frequency is Frequency.CUSTOM_INTERVAL and interval <= 0:
            raise ReminderStateError(
                f"Custom interval must be positive, got {interval}"
            )
        self.frequency = frequency
        self.recurrence_interval = interval
        if trigger_tick is None:
            self.reschedule_next()
            return
        now = self.session.now()
        self.last_trigger_tick = now
        self.trigger_tick = max(now, trigger_tick)

    # --- Persistence ---

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "id": self.id,
            "created_tick": self.created_tick,
            "trigger_tick": self.trigger_tick,
            "last_trigger_tick": self.last_trigger_tick,
            "frequency": self.frequency.value,
            "recurrence_interval": self.recurrence_interval,
            "completed": self.completed,
            "dismissed": self.dismissed,
            "provider": self.provider.to_dict(),
        }
        if self.label_override:
            data["label"] = self.label_override
        if self.description_override:
            data["description"] = self.description_override
        return data

    @classmethod
    def from_dict(cls, session: Session, data: dict[str, Any]) -> Reminder:
        """Rebuild a saved reminder; substitutes safe defaults for bad fields."""
        rid = str(data["id"])
        provider_data = data.get("provider")
        try:
            if not isinstance(provider_data, dict):
                raise TypeError("provider is not a mapping")
            provider = cls.provider_class.from_dict(session, provider_data)
        except (AttributeError, KeyError, TypeError, ValueError):
            log.warning("Rebuilding data provider for reminder %s", rid)
            provider = cls.provider_class.blank(session)

        try:
            frequency = Frequency(data.get("frequency"))
        except ValueError:
            log.warning(
                "Unknown frequency %r on reminder %s", data.get("frequency"), rid
            )
            frequency = cls.default_frequency

        created = int_field(data, "created_tick", 0)
        return cls(
            session,
            provider,
            id=rid,
            created_tick=created,
            trigger_tick=int_field(data, "trigger_tick", created),
            last_trigger_tick=int_field(data, "last_trigger_tick", created),
            frequency=frequency,
            recurrence_interval=int_field(data, "recurrence_interval", 0),
            completed=bool(data.get("completed", False)),
            dismissed=bool(data.get("dismissed", False)),
            label=data.get("label"),
            description=data.get("description"),
        )
