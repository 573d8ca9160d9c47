"""Exceptions raised at explicit API boundaries (never on the tick path)."""


class TickminderError(Exception):
    pass


class ReminderStateError(TickminderError):
    """An edit would leave a reminder with an unusable schedule."""


class SaveFormatError(TickminderError):
    """A save file could not be parsed into reminder records."""
