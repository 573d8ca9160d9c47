"""Tests for ReminderFactory merge semantics."""

from dataclasses import replace

import pytest

from tickminder.errors import ReminderStateError
from tickminder.host import Condition, EventDefinition, MonitoredEntity
from tickminder.reminders import ConditionMonitorReminder, Frequency


def _setup(world):
    c1 = Condition(def_name="Cut", label="cut", load_id=1, part="torso")
    c2 = Condition(def_name="Burn", label="burn", load_id=2, part="hand")
    entity = world.put(MonitoredEntity(id="p1", label="Alice", conditions=(c1, c2)))
    return entity, c1, c2


def test_one_monitor_per_entity(factory, manager, world):
    entity, c1, c2 = _setup(world)

    first = factory.create_condition_monitor(entity, c1)
    second = factory.create_condition_monitor(entity, c2)

    assert first is second
    monitors = manager.get_active(ConditionMonitorReminder)
    assert monitors == [first]
    assert set(first.tracked_ids) == {"1", "2"}


def test_remove_on_immunity_defaults_from_settings(factory, session, settings, world):
    session.settings = replace(settings, remove_on_immunity=False)
    entity, c1, _ = _setup(world)

    monitor = factory.create_condition_monitor(entity, c1)

    assert monitor.provider.remove_on_immunity is False


def test_explicit_remove_on_immunity_wins(factory, world):
    entity, c1, _ = _setup(world)

    monitor = factory.create_condition_monitor(entity, c1, remove_on_immunity=False)

    assert monitor.provider.remove_on_immunity is False


def test_completed_monitor_is_replaced(factory, world):
    entity, c1, _ = _setup(world)
    old = factory.create_condition_monitor(entity, c1)
    old.completed = True

    new = factory.create_condition_monitor(entity, c1)

    assert new is not old
    assert new.tracked_ids == ["1"]


def test_event_monitor_is_reused(factory, manager, events):
    event = events.put(EventDefinition(def_name="Feast", group_id="village", label="Feast"))

    first = factory.create_event_monitor(event)
    second = factory.create_event_monitor(event)

    assert first is second
    assert len(manager) == 1


def test_create_simple(factory, manager):
    reminder = factory.create_simple(
        "Harvest", "Corn field", trigger_tick=900, frequency=Frequency.FIXED_YEARLY
    )

    assert manager.get(reminder.id) is reminder
    assert reminder.get_description() == "Corn field"


def test_create_simple_rejects_bad_interval(factory, manager):
    with pytest.raises(ReminderStateError):
        factory.create_simple("Bad", trigger_tick=10, frequency=Frequency.CUSTOM_INTERVAL)

    assert len(manager) == 0


def test_create_simple_clamps_past_trigger(factory, clock):
    clock.tick = 1000

    reminder = factory.create_simple("Late", trigger_tick=10)

    assert reminder.created_tick == 1000
    assert reminder.trigger_tick == 1000
