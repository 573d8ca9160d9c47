"""Tests for the reminder state machine and simple reminders."""

from dataclasses import replace

import pytest

from tickminder.errors import ReminderStateError
from tickminder.reminders import Frequency, NoteDataProvider, SimpleReminder
from tickminder.ticks import TICKS_PER_DAY, TICKS_PER_HOUR


def test_new_simple_reminder_defaults(session, clock):
    clock.tick = 400
    reminder = SimpleReminder.new(session, "Water plants", "Both pots", trigger_tick=900)

    assert len(reminder.id) == 32
    assert reminder.created_tick == 400
    assert reminder.last_trigger_tick == 400
    assert reminder.trigger_tick == 900
    assert reminder.frequency is Frequency.ONE_TIME
    assert reminder.get_label() == "Water plants"
    assert reminder.get_description() == "Both pots"
    assert not reminder.finished


def test_one_time_trigger_is_idempotent(session, notifier):
    reminder = SimpleReminder.new(session, "once", trigger_tick=0)

    assert reminder.trigger() is True
    assert reminder.completed is True
    assert reminder.trigger() is False
    assert reminder.completed is True
    assert notifier.titles == ["Reminder: once"]


def test_daily_progress_is_monotonic_within_window(session, clock):
    reminder = SimpleReminder.new(
        session, "daily", trigger_tick=1000, frequency=Frequency.FIXED_DAILY
    )

    seen = []
    for tick in range(0, 1001, 50):
        clock.tick = tick
        seen.append(reminder.get_progress())

    assert seen[0] == 0.0
    assert seen == sorted(seen)
    assert seen[-1] == 1.0
    clock.tick = 1500
    assert reminder.get_progress() == 1.0


def test_daily_trigger_reschedules_one_day_out(session, clock):
    reminder = SimpleReminder.new(
        session, "daily", trigger_tick=1000, frequency=Frequency.FIXED_DAILY
    )
    clock.tick = 1000

    reminder.trigger()

    assert not reminder.completed
    assert reminder.last_trigger_tick == 1000
    assert reminder.trigger_tick == 1000 + TICKS_PER_DAY


def test_custom_interval_uses_recurrence(session, clock):
    reminder = SimpleReminder.new(
        session,
        "stretch",
        trigger_tick=300,
        frequency=Frequency.CUSTOM_INTERVAL,
        recurrence_interval=300,
    )
    clock.tick = 350

    reminder.trigger()

    assert reminder.trigger_tick == 650


def test_custom_interval_falls_back_to_previous_window(session, clock):
    reminder = SimpleReminder.new(
        session, "legacy", trigger_tick=5000, frequency=Frequency.CUSTOM_INTERVAL
    )
    clock.tick = 5000

    reminder.trigger()

    assert reminder.trigger_tick == 10000


def test_set_schedule_rejects_non_positive_custom_interval(session):
    reminder = SimpleReminder.new(session, "bad", trigger_tick=100)

    with pytest.raises(ReminderStateError, match="must be positive"):
        reminder.set_schedule(Frequency.CUSTOM_INTERVAL, recurrence_interval=0)

    assert reminder.frequency is Frequency.ONE_TIME


def test_set_schedule_clamps_past_trigger_to_now(session, clock):
    reminder = SimpleReminder.new(session, "edit", trigger_tick=100)
    clock.tick = 5000

    reminder.set_schedule(Frequency.FIXED_DAILY, trigger_tick=10)

    assert reminder.frequency is Frequency.FIXED_DAILY
    assert reminder.trigger_tick == 5000
    assert reminder.last_trigger_tick == 5000


def test_set_schedule_without_tick_reschedules(session, clock):
    reminder = SimpleReminder.new(session, "edit", trigger_tick=100)
    clock.tick = 200

    reminder.set_schedule(Frequency.FIXED_QUADRUM)

    assert reminder.trigger_tick == 200 + 15 * TICKS_PER_DAY


def test_dismissed_reminder_never_triggers(session, notifier):
    reminder = SimpleReminder.new(session, "skip", trigger_tick=0)
    reminder.dismiss()

    assert reminder.finished
    assert reminder.trigger() is False
    assert notifier.sent == []
    assert not reminder.completed


def test_normal_alerts_disabled_still_completes(session, notifier, settings):
    session.settings = replace(settings, enable_normal_alerts=False)
    reminder = SimpleReminder.new(session, "quiet", trigger_tick=0)

    assert reminder.trigger() is False
    assert reminder.completed
    assert notifier.sent == []


def test_pause_setting_is_forwarded(session, notifier, settings):
    session.settings = replace(settings, pause_on_trigger=True)
    SimpleReminder.new(session, "pause", trigger_tick=0).trigger()

    assert notifier.sent == [("Reminder: pause", "No description", True)]


def test_failing_sink_does_not_block_completion(session, notifier, monkeypatch):
    def boom(title, body, *, pause=False):
        raise RuntimeError("sink down")

    monkeypatch.setattr(notifier, "notify", boom)
    reminder = SimpleReminder.new(session, "fragile", trigger_tick=0)

    assert reminder.trigger() is False
    assert reminder.completed


def test_show_notifications_off(session, notifier, settings):
    session.settings = replace(settings, show_notifications=False)

    assert session.notify("title", "body") is False
    assert notifier.sent == []


def test_time_left_and_due(session, clock):
    reminder = SimpleReminder.new(session, "soon", trigger_tick=TICKS_PER_HOUR)

    assert reminder.get_time_left_string() == "in 1 hour"
    assert not reminder.is_due()
    assert not reminder.needs_attention()

    clock.tick = TICKS_PER_HOUR
    assert reminder.get_time_left_string() == "Now"
    assert reminder.is_due()
    assert reminder.needs_attention()


def test_label_override_can_be_cleared(session):
    reminder = SimpleReminder.new(session, "named", trigger_tick=10)

    reminder.set_label(None)
    reminder.set_description("edited")

    assert reminder.get_label() == "Unknown"
    assert reminder.get_description() == "edited"


def test_simple_reminder_to_dict(session):
    reminder = SimpleReminder.new(
        session, "with meta", trigger_tick=10, metadata={"room": "kitchen"}
    )

    data = reminder.to_dict()

    assert data["kind"] == "simple"
    assert data["label"] == "with meta"
    assert "description" not in data
    assert data["frequency"] == "one_time"
    assert data["provider"] == {"metadata": {"room": "kitchen"}}


def test_from_dict_substitutes_bad_fields(session):
    reminder = SimpleReminder.from_dict(
        session,
        {
            "id": "abc",
            "trigger_tick": 50,
            "frequency": "fortnightly",
            "provider": "garbage",
        },
    )

    assert reminder.id == "abc"
    assert reminder.trigger_tick == 50
    assert reminder.created_tick == 0
    assert reminder.frequency is Frequency.ONE_TIME
    assert isinstance(reminder.provider, NoteDataProvider)
    assert reminder.metadata == {}


def test_frequency_display():
    assert Frequency.FIXED_DAILY.display == "Days"
    assert Frequency.CONDITION_DRIVEN.display == "Tending"


def test_from_dict_keeps_saved_trigger_tick(session, clock):
    clock.tick = 1000

    reminder = SimpleReminder.from_dict(
        session,
        {"id": "old", "frequency": "one_time", "trigger_tick": 10, "created_tick": 0, "provider": {}},
    )

    assert reminder.trigger_tick == 10
    assert reminder.is_due()


def test_progress_clamps_last_trigger_after_rollback(session, clock):
    reminder = SimpleReminder.new(
        session, "rollback", trigger_tick=1000, frequency=Frequency.FIXED_DAILY
    )
    reminder.last_trigger_tick = 800
    clock.tick = 500

    assert reminder.window_progress() == 0.0

    clock.tick = 900
    assert reminder.get_progress() == 0.5


def test_progress_is_zero_when_last_trigger_equals_trigger(session, clock):
    reminder = SimpleReminder.new(session, "flat", trigger_tick=100)
    reminder.last_trigger_tick = 100
    clock.tick = 50

    assert reminder.get_progress() == 0.0


def test_custom_interval_falls_back_to_one_day(session, clock):
    clock.tick = 500
    reminder = SimpleReminder.new(
        session, "no window", trigger_tick=500, frequency=Frequency.CUSTOM_INTERVAL
    )

    reminder.trigger()

    assert reminder.last_trigger_tick == 500
    assert reminder.trigger_tick == 500 + TICKS_PER_DAY
