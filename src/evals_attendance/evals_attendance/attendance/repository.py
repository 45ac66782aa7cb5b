from __future__ import annotations

from datetime import date
from typing import Dict, List, Protocol, Sequence, Tuple

from ..attendees.identifier import Attendee
from ..core.enums import EventKind, StatusPredicate
from ..events.model import OccurredAt
from .model import FroshRow, MemberRow


class AttendanceRepository(Protocol):
    def write_batch(
        self,
        tx,
        kind: EventKind,
        event_id: int,
        frosh: Sequence[FroshRow],
        members: Sequence[MemberRow],
    ) -> None:
        """One bulk insert per non-empty population."""

        raise NotImplementedError

    def delete_for_event(self, tx, kind: EventKind, event_id: int) -> None:
        raise NotImplementedError

    def replace_batch(
        self,
        tx,
        kind: EventKind,
        event_id: int,
        frosh: Sequence[FroshRow],
        members: Sequence[MemberRow],
    ) -> None:
        raise NotImplementedError

    def query_by_attendee(
        self,
        kind: EventKind,
        attendee: Attendee,
        cutoff: date,
        predicate: StatusPredicate,
        *,
        approved_only: bool = False,
    ) -> List[OccurredAt]:
        raise NotImplementedError

    def attendance_for_events(
        self, kind: EventKind, event_ids: Sequence[int]
    ) -> Dict[int, Tuple[List[FroshRow], List[MemberRow]]]:
        raise NotImplementedError
