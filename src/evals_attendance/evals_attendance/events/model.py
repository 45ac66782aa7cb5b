from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional, Tuple, Union

from ..attendees.identifier import Population
from ..core.enums import EventKind

OccurredAt = Union[date, datetime]


@dataclass(frozen=True)
class EventTables:
    """Physical layout of one event kind: header table plus two attendance tables."""

    event_table: str
    occurred_at_column: str
    frosh_table: str
    member_table: str
    event_fk: str
    name_column: Optional[str] = None
    has_approval: bool = False

    def attendance_table(self, population: Population) -> Tuple[str, str]:
        """(table, attendee column) holding ``population``'s rows."""
        if population == Population.FROSH:
            return self.frosh_table, "fid"
        return self.member_table, "uid"


TABLES: Dict[EventKind, EventTables] = {
    EventKind.HOUSE: EventTables(
        event_table="house_meetings",
        occurred_at_column="date",
        frosh_table="freshman_hm_attendance",
        member_table="member_hm_attendance",
        event_fk="meeting_id",
    ),
    EventKind.SEMINAR: EventTables(
        event_table="technical_seminars",
        occurred_at_column="timestamp",
        frosh_table="freshman_seminar_attendance",
        member_table="member_seminar_attendance",
        event_fk="seminar_id",
        name_column="name",
        has_approval=True,
    ),
    EventKind.COMMITTEE: EventTables(
        event_table="committee_meetings",
        occurred_at_column="timestamp",
        frosh_table="freshman_committee_attendance",
        member_table="member_committee_attendance",
        event_fk="meeting_id",
        name_column="committee",
        has_approval=True,
    ),
}


def tables_for(kind: EventKind) -> EventTables:
    return TABLES[EventKind(kind)]


@dataclass(frozen=True)
class Event:
    """Header row of a house meeting, technical seminar or committee meeting."""

    event_id: int
    kind: EventKind
    occurred_at: OccurredAt
    active: bool = True
    approved: Optional[bool] = None
    name: Optional[str] = None
