from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from ..attendees.identifier import classify, frosh_id, member_handle
from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.validators import require_field, require_list, require_non_empty
from ..core.enums import AttendanceStatus, CommitteeType, EventKind, StatusPredicate
from ..core.exceptions import NotFoundError, ValidationError
from ..events.model import OccurredAt, tables_for
from ..events.repository import EventRepository
from .model import AttendanceSubmission, EventAttendance, FroshRow, MemberRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 128


class TransactionSource(Protocol):
    def begin(self):
        """Context manager yielding a transaction; commits on clean exit."""

        raise NotImplementedError


class AttendanceService:
    """Write sequences and per-attendee reports for every event kind.

    Each write runs inside one transaction: either every statement lands or
    none does. Payloads and identifiers are validated before a connection is
    opened.
    """

    def __init__(
        self,
        events: EventRepository,
        attendance: AttendanceRepository,
        transactions: TransactionSource,
        *,
        year_start: date,
    ):
        self._events = events
        self._attendance = attendance
        self._transactions = transactions
        self._year_start = year_start

    @property
    def year_start(self) -> date:
        return self._year_start

    # ----- writes -----

    def submit(self, kind: EventKind, body: Any, *, auto_approve: bool = False) -> int:
        kind = EventKind(kind)
        submission = self.parse_submission(kind, body)
        approved = bool(auto_approve) and tables_for(kind).has_approval

        with self._transactions.begin() as tx:
            event_id = self._events.create_event(
                tx, kind, submission.occurred_at, name=submission.name, approved=approved
            )
            self._attendance.write_batch(tx, kind, event_id, submission.frosh, submission.members)

        logger.info(
            "Created %s %s (frosh=%d, members=%d, approved=%s)",
            kind.value,
            event_id,
            len(submission.frosh),
            len(submission.members),
            approved,
        )
        return event_id

    def edit(self, kind: EventKind, event_id: int, body: Any) -> None:
        """Replace the whole attendance set of an event (delete, then reinsert)."""

        kind = EventKind(kind)
        submission = self.parse_submission(kind, body, with_header=False)

        with self._transactions.begin() as tx:
            self._require_event(tx, kind, event_id)
            self._attendance.replace_batch(tx, kind, event_id, submission.frosh, submission.members)

        logger.info("Replaced attendance of %s %s", kind.value, event_id)

    def delete(self, kind: EventKind, event_id: int) -> None:
        kind = EventKind(kind)
        with self._transactions.begin() as tx:
            self._require_event(tx, kind, event_id)
            # Children before the header row.
            self._attendance.delete_for_event(tx, kind, event_id)
            self._events.delete_event(tx, kind, event_id)

        logger.info("Deleted %s %s", kind.value, event_id)

    def approve(self, kind: EventKind, event_id: int, *, approved: bool = True) -> None:
        kind = EventKind(kind)
        if not tables_for(kind).has_approval:
            raise ValidationError(f"{kind.value} events have no approval")

        with self._transactions.begin() as tx:
            self._require_event(tx, kind, event_id)
            self._events.set_approved(tx, kind, event_id, approved)

        logger.info("Set approved=%s on %s %s", approved, kind.value, event_id)

    def _require_event(self, tx, kind: EventKind, event_id: int) -> None:
        if not self._events.exists(tx, kind, event_id):
            raise NotFoundError(f"No {kind.value} event with id {event_id}")

    # ----- reads -----

    def dates_for(
        self,
        kind: EventKind,
        identifier: str,
        predicate: StatusPredicate,
        *,
        approved_only: bool = False,
    ) -> List[OccurredAt]:
        attendee = classify(identifier)
        return list(
            self._attendance.query_by_attendee(
                EventKind(kind),
                attendee,
                self._year_start,
                StatusPredicate(predicate),
                approved_only=approved_only,
            )
        )

    def list_events(self, kind: EventKind) -> List[EventAttendance]:
        kind = EventKind(kind)
        events = list(self._events.list_since(kind, self._year_start))
        by_event = self._attendance.attendance_for_events(kind, [e.event_id for e in events])
        out = []
        for ev in events:
            frosh, members = by_event.get(ev.event_id, ([], []))
            out.append(EventAttendance(event=ev, frosh=tuple(frosh), members=tuple(members)))
        return out

    # ----- payload parsing -----

    @classmethod
    def parse_submission(cls, kind: EventKind, body: Any, *, with_header: bool = True) -> AttendanceSubmission:
        """Validate a POST/PUT body.

        ``with_header=False`` is used on edit, where only the attendance lists
        are replaced and header fields in the body are ignored.
        """

        if not isinstance(body, Mapping):
            raise ValidationError("Request body must be a JSON object")

        occurred_at = None
        name = None
        if with_header:
            # "date"/"timestamp" are the field names older clients send.
            raw_when = body.get("occurred_at", body.get("date", body.get("timestamp")))
            if raw_when is None:
                raise ValidationError("Missing attribute 'occurred_at'")
            occurred_at = cls._parse_occurred_at(kind, raw_when)
            name = cls._parse_name(kind, body)

        frosh = cls._parse_frosh(require_list(body, "frosh"))
        members = cls._parse_members(require_list(body, "members"))
        return AttendanceSubmission(occurred_at=occurred_at, frosh=frosh, members=members, name=name)

    @staticmethod
    def _parse_occurred_at(kind: EventKind, value: Any) -> OccurredAt:
        if not isinstance(value, str):
            raise ValidationError("Invalid 'occurred_at'")
        try:
            if kind == EventKind.HOUSE:
                return parse_iso_date(value.strip())
            return parse_iso_datetime(value)
        except ValueError:
            raise ValidationError("Invalid 'occurred_at'")

    @staticmethod
    def _parse_name(kind: EventKind, body: Mapping[str, Any]) -> Optional[str]:
        if kind == EventKind.SEMINAR:
            name = require_non_empty(require_field(body, "name"), "name")
            if len(name) > MAX_NAME_LENGTH:
                raise ValidationError(f"'name' is longer than {MAX_NAME_LENGTH} characters")
            return name
        if kind == EventKind.COMMITTEE:
            raw = body.get("name", body.get("committee"))
            if raw is None:
                raise ValidationError("Missing attribute 'committee'")
            try:
                return CommitteeType(raw).value
            except ValueError:
                raise ValidationError(f"Unknown committee {raw!r}")
        return None

    @staticmethod
    def _parse_status(value: Any) -> AttendanceStatus:
        if value is None:
            return AttendanceStatus.ATTENDED
        try:
            return AttendanceStatus(value)
        except ValueError:
            pass
        if isinstance(value, str) and value.upper() in AttendanceStatus.__members__:
            return AttendanceStatus[value.upper()]
        raise ValidationError(f"Unknown attendance status {value!r}")

    @classmethod
    def _parse_frosh(cls, entries: Sequence[Any]) -> tuple[FroshRow, ...]:
        rows: list[FroshRow] = []
        seen: set[int] = set()
        for entry in entries:
            # Bare ids are accepted and count as attended.
            if isinstance(entry, Mapping):
                attendee = frosh_id(require_field(entry, "id"))
                status = cls._parse_status(entry.get("status"))
            else:
                attendee = frosh_id(entry)
                status = AttendanceStatus.ATTENDED
            if attendee.fid in seen:
                raise ValidationError(f"Duplicate frosh id {attendee.fid}")
            seen.add(attendee.fid)
            rows.append((attendee.fid, status))
        return tuple(rows)

    @classmethod
    def _parse_members(cls, entries: Sequence[Any]) -> tuple[MemberRow, ...]:
        rows: list[MemberRow] = []
        seen: set[str] = set()
        for entry in entries:
            if isinstance(entry, Mapping):
                attendee = member_handle(require_field(entry, "handle"))
                status = cls._parse_status(entry.get("status"))
            else:
                attendee = member_handle(entry)
                status = AttendanceStatus.ATTENDED
            if attendee.uid in seen:
                raise ValidationError(f"Duplicate member handle {attendee.uid!r}")
            seen.add(attendee.uid)
            rows.append((attendee.uid, status))
        return tuple(rows)
