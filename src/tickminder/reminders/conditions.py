"""Condition-monitor reminders: treatment timers on one monitored entity.

A monitor tracks a set of condition ids rather than a single condition, since
a wound that heals, worsens or gets replaced is still the same concern from
the player's point of view. Ids are either the host's numeric load id or a
composite ``def_name@part`` key for conditions without a stable numeric id.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tickminder.reminders.base import DataProvider, Frequency, Reminder, int_field
from tickminder.ticks import TICKS_PER_DAY, TICKS_PER_HOUR, clamp01, format_duration

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tickminder.host import Condition, MonitoredEntity
    from tickminder.session import Session

log = logging.getLogger(__name__)


def condition_key(condition: Condition) -> str:
    if condition.load_id > 0:
        return str(condition.load_id)
    if condition.part:
        return f"{condition.def_name}@{condition.part}"
    return condition.def_name


def resolve_condition(key: str, conditions: Iterable[Condition]) -> Condition | None:
    """Numeric load id first, then the composite def@part key."""
    if key.isdigit():
        load_id = int(key)
        return next((c for c in conditions if c.load_id == load_id), None)
    def_name, _, part = key.partition("@")
    for condition in conditions:
        if condition.def_name != def_name:
            continue
        if not part or condition.part is None or condition.part == part:
            return condition
    return None


def _timer_rank(condition: Condition) -> int:
    """Remaining ticks, with -1 for "needs attention now, no timer"."""
    if not condition.tended or condition.ticks_left < 0:
        return -1
    return condition.ticks_left


def urgency_key(condition: Condition, key: str) -> tuple[bool, bool, int, str]:
    """Sort key: bleeding, then disease, then soonest timer, then condition id."""
    return (not condition.bleeding, not condition.disease, _timer_rank(condition), key)


def most_urgent(tracked: Iterable[tuple[str, Condition]]) -> tuple[str, Condition] | None:
    """Keep the soonest instance per def@part group, then pick by urgency."""
    best: dict[tuple[str, str | None], tuple[str, Condition]] = {}
    for key, condition in tracked:
        group = (condition.def_name, condition.part)
        current = best.get(group)
        if current is None or (_timer_rank(condition), key) < (
            _timer_rank(current[1]),
            current[0],
        ):
            best[group] = (key, condition)
    if not best:
        return None
    return min(best.values(), key=lambda item: urgency_key(item[1], item[0]))


class ConditionDataProvider(DataProvider):
    def __init__(
        self,
        session: Session,
        entity_id: str,
        *,
        entity_label: str = "",
        tracked_ids: Iterable[str] = (),
        remove_on_immunity: bool = False,
        allotted_ticks: int = -1,
    ) -> None:
        super().__init__(session)
        self.entity_id = entity_id
        self.entity_label = entity_label
        self.tracked_ids: list[str] = []
        for key in tracked_ids:
            if key not in self.tracked_ids:
                self.tracked_ids.append(key)
        self.remove_on_immunity = remove_on_immunity
        self.allotted_ticks = allotted_ticks  # -1 until first observed
        self.selected_key: str | None = None
        self.next_check_ticks: int | None = None
        self.invalid = False

    def track(self, condition: Condition) -> bool:
        key = condition_key(condition)
        if key in self.tracked_ids:
            return False
        self.tracked_ids.append(key)
        return True

    def adopt(self, keys: Iterable[str]) -> int:
        """Add ids tracked elsewhere; returns how many were new."""
        added = 0
        for key in keys:
            if key not in self.tracked_ids:
                self.tracked_ids.append(key)
                added += 1
        return added

    def _resolve_entity(self) -> MonitoredEntity | None:
        resolver = self.session.entities
        if resolver is None or not self.entity_id:
            return None
        return resolver.resolve(self.entity_id)

    def _live_conditions(self, entity: MonitoredEntity) -> list[tuple[str, Condition]]:
        """Resolve tracked ids, pruning the ones that are gone or ineligible."""
        policy = self.session.condition_policy
        live: list[tuple[str, Condition]] = []
        for key in list(self.tracked_ids):
            found = resolve_condition(key, entity.conditions)
            if found is None or not policy(entity, found):
                self.tracked_ids.remove(key)
                continue
            if (
                self.remove_on_immunity
                and found.immunity is not None
                and found.immunity >= 1.0
            ):
                log.debug("%s is immune to %s", entity.label, found.label)
                self.tracked_ids.remove(key)
                continue
            live.append((key, found))
        return live

    def _recompute(self) -> None:
        self.obsolete = False
        self.invalid = False
        self.selected_key = None
        self.next_check_ticks = None

        entity = self._resolve_entity()
        if entity is None:
            self._show_invalid()
            return
        self.entity_label = entity.label

        picked = most_urgent(self._live_conditions(entity))
        if picked is None:
            self._show_resolved()
            return
        key, urgent = picked
        self.selected_key = key
        self.needs_attention = urgent.needs_attention
        remaining = 0 if self.needs_attention else urgent.next_treatable_in
        self.next_check_ticks = remaining
        if remaining > self.allotted_ticks:
            self.allotted_ticks = remaining
        self.progress = self._progress(remaining)

        self.label = f"Tend {entity.label}'s {urgent.label}"
        self.description = self._describe(entity, urgent)
        if self.needs_attention:
            self.time_left = "Now"
        else:
            self.time_left = f"in {format_duration(remaining)}"

    def _progress(self, remaining: int) -> float:
        if self.needs_attention or remaining <= 0:
            return 1.0
        if self.allotted_ticks <= 0:
            return 0.0
        return clamp01(1.0 - remaining / self.allotted_ticks)

    def _show_invalid(self) -> None:
        self.invalid = True
        who = self.entity_label or self.entity_id or "unknown"
        self.label = "Invalid monitor"
        self.description = f"{who} could not be found. This reminder is monitor-only."
        self.time_left = "N/A"
        self.progress = 0.0
        self.needs_attention = False

    def _show_resolved(self) -> None:
        self.obsolete = True
        self.label = f"Tend {self.entity_label}"
        self.description = "No conditions currently require tending."
        self.time_left = "N/A"
        self.progress = 0.0
        self.needs_attention = False

    def _describe(self, entity: MonitoredEntity, condition: Condition) -> str:
        lines = [f"{entity.label}'s {condition.label} ({condition.def_label or condition.def_name})"]
        if _timer_rank(condition) < 0:
            lines.append("Needs tending now!")
        elif condition.next_treatable_in <= 0:
            lines.append(f"Tended {condition.tend_quality:.0%}, can be tended again now.")
        else:
            hours = condition.next_treatable_in / TICKS_PER_HOUR
            lines.append(f"Tended {condition.tend_quality:.0%}, next tend in {hours:.1f}h.")

        if condition.chronic and condition.severity_per_day is not None:
            change = condition.severity_per_day
            direction = "decreasing" if change < 0 else "increasing"
            lines.append(f"Severity/day: {abs(change):.3f} ({direction})")
        elif condition.immunity is not None:
            line = f"Immunity: {condition.immunity:.0%}"
            if condition.immunity >= 0.8:
                line += " (Almost immune)"
            elif condition.immunity >= 0.5:
                line += " (Good progress)"
            lines.append(line)

        if condition.bleeding and entity.ticks_until_bleed_out is not None:
            lines.append(
                f"Death from blood loss in {format_duration(entity.ticks_until_bleed_out)}"
            )
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "entity_label": self.entity_label,
            "tracked_ids": list(self.tracked_ids),
            "remove_on_immunity": self.remove_on_immunity,
            "allotted_ticks": self.allotted_ticks,
        }

    @classmethod
    def from_dict(cls, session: Session, data: dict[str, Any]) -> ConditionDataProvider:
        return cls(
            session,
            str(data["entity_id"]),
            entity_label=str(data.get("entity_label") or ""),
            tracked_ids=[str(key) for key in data.get("tracked_ids") or []],
            remove_on_immunity=bool(data.get("remove_on_immunity", False)),
            allotted_ticks=int_field(data, "allotted_ticks", -1),
        )

    @classmethod
    def blank(cls, session: Session) -> ConditionDataProvider:
        return cls(session, "")


class ConditionMonitorReminder(Reminder):
    kind = "condition"
    provider_class = ConditionDataProvider
    default_frequency = Frequency.CONDITION_DRIVEN
    provider: ConditionDataProvider

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        # Previous sweep's attention state; notifications fire on the rising edge
        self._attention_last = False

    @classmethod
    def new(
        cls,
        session: Session,
        entity: MonitoredEntity,
        condition: Condition,
        *,
        remove_on_immunity: bool = False,
    ) -> ConditionMonitorReminder:
        provider = ConditionDataProvider(
            session,
            entity.id,
            entity_label=entity.label,
            tracked_ids=[condition_key(condition)],
            remove_on_immunity=remove_on_immunity,
        )
        reminder = cls(session, provider)
        reminder.refresh()
        reminder.trigger_tick = reminder._adaptive_next_tick(session.now())
        return reminder

    @property
    def entity_id(self) -> str:
        return self.provider.entity_id

    @property
    def tracked_ids(self) -> list[str]:
        return list(self.provider.tracked_ids)

    def track(self, condition: Condition) -> bool:
        """Merge another condition into this monitor; returns whether it was new."""
        added = self.provider.track(condition)
        self._pull_forward()
        return added

    def merge_tracked(self, keys: Iterable[str]) -> int:
        """Take over ids from a duplicate monitor; returns how many were new."""
        added = self.provider.adopt(keys)
        if added:
            self._pull_forward()
        return added

    def _pull_forward(self) -> None:
        self.refresh()
        now = self.session.now()
        self.trigger_tick = max(now, min(self.trigger_tick, self._adaptive_next_tick(now)))

    def _adaptive_next_tick(self, now: int) -> int:
        check = self.provider.next_check_ticks
        if check is None:
            return now + TICKS_PER_DAY
        return now + min(max(check, 0), TICKS_PER_DAY)

    def _pending_notification(self) -> tuple[str, str] | None:
        attention = self.provider.needs_attention
        rising = attention and not self._attention_last
        self._attention_last = attention
        if not rising or not self.session.settings.enable_condition_alerts:
            return None
        return f"Tend reminder: {self.get_label()}", self.get_description()
