from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..attendees.identifier import Attendee, Frosh, Member
from ..core.enums import AttendanceStatus
from ..events.model import Event, OccurredAt

FroshRow = Tuple[int, AttendanceStatus]
MemberRow = Tuple[str, AttendanceStatus]


@dataclass(frozen=True)
class AttendanceRecord:
    """One attendee's status at one event.

    Backed by the frosh or the member table of the event kind, chosen by the
    attendee variant.
    """

    event_id: int
    attendee: Attendee
    status: AttendanceStatus


@dataclass(frozen=True)
class AttendanceSubmission:
    """Validated POST/PUT body. Header fields are unset on edit."""

    occurred_at: Optional[OccurredAt] = None
    frosh: Tuple[FroshRow, ...] = ()
    members: Tuple[MemberRow, ...] = ()
    name: Optional[str] = None


@dataclass(frozen=True)
class EventAttendance:
    """Read-model for the event listing: header plus everyone recorded."""

    event: Event
    frosh: Tuple[FroshRow, ...] = ()
    members: Tuple[MemberRow, ...] = ()

    def records(self) -> List[AttendanceRecord]:
        eid = self.event.event_id
        out = [AttendanceRecord(eid, Frosh(fid), status) for fid, status in self.frosh]
        out.extend(AttendanceRecord(eid, Member(uid), status) for uid, status in self.members)
        return out

    def to_dict(self) -> dict:
        ev = self.event
        data = {
            "id": ev.event_id,
            "kind": ev.kind.value,
            "occurred_at": ev.occurred_at.isoformat(),
            "active": ev.active,
            "frosh": [{"id": fid, "status": status.value} for fid, status in self.frosh],
            "members": [{"handle": uid, "status": status.value} for uid, status in self.members],
        }
        if ev.name is not None:
            data["name"] = ev.name
        if ev.approved is not None:
            data["approved"] = ev.approved
        return data
