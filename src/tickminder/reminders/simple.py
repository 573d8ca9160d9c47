"""Plain time-based reminders: one-shot or fixed recurrence."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tickminder.reminders.base import DataProvider, Frequency, Reminder

if TYPE_CHECKING:
    from tickminder.session import Session


class NoteDataProvider(DataProvider):
    """Free-form metadata attached by the host; nothing to resolve."""

    def __init__(self, session: Session, metadata: dict[str, str] | None = None) -> None:
        super().__init__(session)
        self.metadata: dict[str, str] = dict(metadata or {})

    def to_dict(self) -> dict[str, Any]:
        return {"metadata": dict(self.metadata)} if self.metadata else {}

    @classmethod
    def from_dict(cls, session: Session, data: dict[str, Any]) -> NoteDataProvider:
        metadata = data.get("metadata") or {}
        return cls(session, {str(k): str(v) for k, v in metadata.items()})


class SimpleReminder(Reminder):
    kind = "simple"
    provider_class = NoteDataProvider
    provider: NoteDataProvider

    @classmethod
    def new(
        cls,
        session: Session,
        label: str,
        description: str = "",
        *,
        trigger_tick: int,
        frequency: Frequency = Frequency.ONE_TIME,
        recurrence_interval: int = 0,
        metadata: dict[str, str] | None = None,
    ) -> SimpleReminder:
        """Create a reminder; a trigger tick already in the past fires on the next sweep."""
        return cls(
            session,
            NoteDataProvider(session, metadata),
            trigger_tick=max(session.now(), trigger_tick),
            frequency=frequency,
            recurrence_interval=recurrence_interval,
            label=label,
            description=description,
        )

    @property
    def metadata(self) -> dict[str, str]:
        return self.provider.metadata

    def _pending_notification(self) -> tuple[str, str] | None:
        if not self.session.settings.enable_normal_alerts:
            return None
        return super()._pending_notification()

    def needs_attention(self) -> bool:
        return self.is_due()
