"""Shared fixtures for tickminder tests: a manual clock and fake host collaborators."""

import pytest

from tickminder.config import Settings
from tickminder.host import EventDefinition, ManualClock, MonitoredEntity
from tickminder.session import Session


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, bool]] = []

    def notify(self, title, body, *, pause=False):
        self.sent.append((title, body, pause))

    @property
    def titles(self):
        return [title for title, _, _ in self.sent]


class FakeWorld:
    """Entity resolver backed by a dict; tests swap snapshots in and out."""

    def __init__(self):
        self.entities: dict[str, MonitoredEntity] = {}

    def put(self, entity: MonitoredEntity) -> MonitoredEntity:
        self.entities[entity.id] = entity
        return entity

    def remove(self, entity_id: str) -> None:
        self.entities.pop(entity_id, None)

    def resolve(self, entity_id):
        return self.entities.get(entity_id)

    def monitored_entities(self):
        return list(self.entities.values())


class FakeEvents:
    def __init__(self):
        self.events: dict[tuple[str, str], EventDefinition] = {}
        self.blocked: dict[str, str] = {}

    def put(self, event: EventDefinition) -> EventDefinition:
        self.events[(event.group_id, event.def_name)] = event
        return event

    def remove(self, group_id: str, def_name: str) -> None:
        self.events.pop((group_id, def_name), None)

    def find(self, group_id, def_name):
        return self.events.get((group_id, def_name))

    def can_start(self, event):
        return self.blocked.get(event.def_name)

    def definitions(self):
        return list(self.events.values())


@pytest.fixture()
def clock():
    return ManualClock(0)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def world():
    return FakeWorld()


@pytest.fixture()
def events():
    return FakeEvents()


@pytest.fixture()
def settings():
    return Settings()


@pytest.fixture()
def session(clock, notifier, world, events, settings):
    return Session(
        clock=clock,
        notifier=notifier,
        entities=world,
        events=events,
        settings=settings,
    )


@pytest.fixture()
def manager(session):
    from tickminder.manager import ReminderManager

    mgr = ReminderManager(session)
    mgr.start()
    yield mgr
    mgr.shutdown()


@pytest.fixture()
def factory(manager):
    from tickminder.factory import ReminderFactory

    return ReminderFactory(manager)


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Redirect the default save file to a temp directory."""
    import tickminder.storage as storage_mod

    monkeypatch.setattr(storage_mod, "DATA_DIR", tmp_path)
    monkeypatch.setattr(storage_mod, "SAVE_FILE", tmp_path / "reminders.yaml")
    return tmp_path
