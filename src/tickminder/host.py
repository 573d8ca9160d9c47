"""Contracts for the host simulation: clock, entities, events, notifications.

The engine never holds live host objects across ticks. Hosts hand over
immutable snapshots (Condition, MonitoredEntity, EventDefinition) on every
lookup, and the engine only persists the ids it needs to look them up again.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

_GONE_MARKERS = ("missing", "removed")


@dataclass(frozen=True, slots=True)
class Condition:
    def_name: str
    label: str
    load_id: int = 0  # <= 0 when the host has no stable numeric id
    def_label: str = ""
    part: str | None = None  # body-location key
    tendable: bool = True
    permanent: bool = False
    has_timer: bool = True
    tended: bool = False
    ticks_left: int = -1  # -1 = needs attention now
    overlap: int = 0  # re-treatable this many ticks before the timer runs out
    tend_quality: float = 0.0
    permanent_once_tended: bool = False
    bleeding: bool = False
    disease: bool = False
    chronic: bool = False
    immunity: float | None = None
    severity_per_day: float | None = None

    @property
    def next_treatable_in(self) -> int:
        """Ticks until the condition can be treated again; <= 0 means now."""
        if self.bleeding or not self.tended or self.ticks_left <= 0:
            return 0
        return self.ticks_left - self.overlap

    @property
    def needs_attention(self) -> bool:
        return self.bleeding or not self.tended or self.next_treatable_in <= 0


@dataclass(frozen=True, slots=True)
class MonitoredEntity:
    id: str
    label: str
    conditions: tuple[Condition, ...] = field(default_factory=tuple)
    ticks_until_bleed_out: int | None = None


@dataclass(frozen=True, slots=True)
class EventDefinition:
    def_name: str
    group_id: str
    label: str
    description: str = ""
    anytime: bool = False
    date_triggered: bool = False
    next_occurrence_tick: int | None = None
    repeat_penalty_active: bool = False
    repeat_penalty_progress: float = 0.0
    last_finished_tick: int = -1


class Clock(Protocol):
    def current_tick(self) -> int: ...


class EntityResolver(Protocol):
    def resolve(self, entity_id: str) -> MonitoredEntity | None: ...

    def monitored_entities(self) -> Iterable[MonitoredEntity]: ...


class EventSource(Protocol):
    def find(self, group_id: str, def_name: str) -> EventDefinition | None: ...

    def can_start(self, event: EventDefinition) -> str | None:
        """None when the event may start now, otherwise the reason it cannot."""
        ...

    def definitions(self) -> Iterable[EventDefinition]: ...


class NotificationSink(Protocol):
    def notify(self, title: str, body: str, *, pause: bool = False) -> None: ...


ConditionPolicy = Callable[[MonitoredEntity, Condition], bool]


class ManualClock:
    """Clock driven explicitly by the host loop."""

    def __init__(self, tick: int = 0) -> None:
        self.tick = tick

    def current_tick(self) -> int:
        return self.tick

    def advance(self, ticks: int = 1) -> int:
        self.tick += ticks
        return self.tick


def _names_gone_part(condition: Condition) -> bool:
    text = f"{condition.def_name} {condition.label}".lower()
    return any(marker in text for marker in _GONE_MARKERS)


def default_condition_policy(entity: MonitoredEntity, condition: Condition) -> bool:
    """Whether a condition is still worth monitoring on its entity."""
    if not condition.tendable or condition.permanent:
        return False
    if not condition.has_timer and not condition.bleeding:
        return False
    if condition.permanent_once_tended and condition.tended:
        return False
    if _names_gone_part(condition):
        return False
    if condition.part is not None:
        for other in entity.conditions:
            if other.part == condition.part and _names_gone_part(other):
                return False
    return True


def needs_treatment(
    entity: MonitoredEntity,
    condition: Condition,
    policy: ConditionPolicy = default_condition_policy,
) -> bool:
    """Auto-creation rule: monitorable, not chronic, bleeding or on a timer."""
    if not policy(entity, condition):
        return False
    if condition.chronic:
        return False
    return condition.bleeding or condition.has_timer
