from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EventKind
from .model import Event, OccurredAt


class EventRepository(Protocol):
    def create_event(
        self,
        tx,
        kind: EventKind,
        occurred_at: OccurredAt,
        *,
        name: Optional[str] = None,
        approved: bool = False,
    ) -> int:
        """Insert the header row inside ``tx`` and return its generated id."""

        raise NotImplementedError

    def exists(self, tx, kind: EventKind, event_id: int) -> bool:
        raise NotImplementedError

    def delete_event(self, tx, kind: EventKind, event_id: int) -> bool:
        """Delete the header row only; attendance rows must already be gone."""

        raise NotImplementedError

    def set_approved(self, tx, kind: EventKind, event_id: int, approved: bool) -> bool:
        raise NotImplementedError

    def list_since(self, kind: EventKind, cutoff: date) -> Sequence[Event]:
        raise NotImplementedError
