from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Dict, Optional, Tuple

import mysql.connector
import pytest

from src.evals_attendance.evals_attendance.attendance.service import AttendanceService
from src.evals_attendance.evals_attendance.attendees.identifier import Population, attendee_key, population_of
from src.evals_attendance.evals_attendance.container import Container
from src.evals_attendance.evals_attendance.core.enums import AttendanceStatus, EventKind, StatusPredicate
from src.evals_attendance.evals_attendance.core.exceptions import CommitError, StoreError, ValidationError
from src.evals_attendance.evals_attendance.events.model import Event, tables_for

YEAR_START = date(2024, 8, 1)


def _after(value, cutoff: date) -> bool:
    if isinstance(value, datetime):
        return value > datetime.combine(cutoff, datetime.min.time())
    return value > cutoff


@dataclass
class State:
    events: Dict[EventKind, Dict[int, Event]] = field(default_factory=lambda: {k: {} for k in EventKind})
    # (kind, population) -> {(event_id, attendee key): status}
    attendance: Dict[Tuple[EventKind, Population], Dict[tuple, AttendanceStatus]] = field(
        default_factory=lambda: {(k, p): {} for k in EventKind for p in Population}
    )


class FakeTx:
    def __init__(self, db: "InMemoryDatabase", state: State):
        self._db = db
        self.state = state

    def step(self, label: str) -> None:
        self._db.steps.append(label)
        if self._db.fail_on_step is not None and len(self._db.steps) == self._db.fail_on_step:
            raise StoreError(f"injected failure at {label}")


class InMemoryDatabase:
    """Snapshot-per-transaction store; a transaction's work is visible only after commit."""

    def __init__(self):
        self.state = State()
        self.next_id = 0
        self.steps: list[str] = []
        self.fail_on_step: Optional[int] = None
        self.fail_commit = False
        self.begun = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def begin(self):
        self.begun += 1
        self.steps = []
        tx = FakeTx(self, copy.deepcopy(self.state))
        try:
            yield tx
        except BaseException:
            self.rollbacks += 1
            raise
        if self.fail_commit:
            self.rollbacks += 1
            raise CommitError("commit failed")
        self.state = tx.state
        self.commits += 1

    def rows(self, kind: EventKind, population: Population) -> Dict[tuple, AttendanceStatus]:
        return self.state.attendance[(kind, population)]


class InMemoryEvents:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def create_event(self, tx, kind, occurred_at, *, name=None, approved=False) -> int:
        tx.step("create_event")
        self._db.next_id += 1
        t = tables_for(kind)
        tx.state.events[kind][self._db.next_id] = Event(
            event_id=self._db.next_id,
            kind=kind,
            occurred_at=occurred_at,
            approved=bool(approved) if t.has_approval else None,
            name=name,
        )
        return self._db.next_id

    def exists(self, tx, kind, event_id) -> bool:
        tx.step("exists")
        return int(event_id) in tx.state.events[kind]

    def delete_event(self, tx, kind, event_id) -> bool:
        tx.step("delete_event")
        return tx.state.events[kind].pop(int(event_id), None) is not None

    def set_approved(self, tx, kind, event_id, approved) -> bool:
        if not tables_for(kind).has_approval:
            raise ValidationError("no approval")
        tx.step("set_approved")
        ev = tx.state.events[kind].get(int(event_id))
        if ev is None:
            return False
        tx.state.events[kind][ev.event_id] = replace(ev, approved=bool(approved))
        return True

    def list_since(self, kind, cutoff):
        events = [e for e in self._db.state.events[kind].values() if _after(e.occurred_at, cutoff)]
        return sorted(events, key=lambda e: (e.occurred_at, e.event_id))


class InMemoryAttendance:
    def __init__(self, db: InMemoryDatabase):
        self._db = db
        self.batches: list[tuple[EventKind, Population, int]] = []

    def write_batch(self, tx, kind, event_id, frosh, members) -> None:
        for population, rows in ((Population.FROSH, frosh), (Population.MEMBER, members)):
            if not rows:
                continue
            tx.step(f"insert_{population.value}")
            table = tx.state.attendance[(kind, population)]
            for key, status in rows:
                if (event_id, key) in table:
                    raise StoreError("Duplicate entry for PRIMARY key")
                table[(event_id, key)] = AttendanceStatus(status)
            self.batches.append((kind, population, len(rows)))

    def delete_for_event(self, tx, kind, event_id) -> None:
        for population in Population:
            tx.step(f"delete_{population.value}")
            table = tx.state.attendance[(kind, population)]
            for k in [k for k in table if k[0] == event_id]:
                del table[k]

    def replace_batch(self, tx, kind, event_id, frosh, members) -> None:
        self.delete_for_event(tx, kind, event_id)
        self.write_batch(tx, kind, event_id, frosh, members)

    def query_by_attendee(self, kind, attendee, cutoff, predicate, *, approved_only=False):
        table = self._db.rows(kind, population_of(attendee))
        events = self._db.state.events[kind]
        key = attendee_key(attendee)
        out = []
        for (event_id, k), status in table.items():
            ev = events.get(event_id)
            if k != key or ev is None or not _after(ev.occurred_at, cutoff):
                continue
            if predicate == StatusPredicate.ABSENT and status != AttendanceStatus.ABSENT:
                continue
            if predicate == StatusPredicate.NOT_ATTENDED and status == AttendanceStatus.ATTENDED:
                continue
            if predicate == StatusPredicate.ATTENDED and status != AttendanceStatus.ATTENDED:
                continue
            if approved_only and ev.approved is False:
                continue
            out.append(ev.occurred_at)
        return sorted(out)

    def attendance_for_events(self, kind, event_ids):
        result = {int(i): ([], []) for i in event_ids}
        for idx, population in enumerate((Population.FROSH, Population.MEMBER)):
            for (event_id, key), status in sorted(self._db.rows(kind, population).items(), key=lambda kv: kv[0]):
                if event_id in result:
                    result[event_id][idx].append((key, status))
        return result


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def attendance_repo(db) -> InMemoryAttendance:
    return InMemoryAttendance(db)


@pytest.fixture
def service(db, attendance_repo) -> AttendanceService:
    return AttendanceService(InMemoryEvents(db), attendance_repo, db, year_start=YEAR_START)


@pytest.fixture
def container(db, attendance_repo, service) -> Container:
    return Container(
        conn=None,
        events_repo=InMemoryEvents(db),
        attendance_repo=attendance_repo,
        transactions=db,
        attendance_service=service,
    )


class FakeCursor:
    """Records statements; replays queued result sets in order."""

    def __init__(self, conn: "FakeConnection"):
        self._conn = conn
        self._rows: list = []
        self.lastrowid = None
        self.rowcount = 0
        self.closed = False

    def _maybe_fail(self, sql: str) -> None:
        if self._conn.fail_on and self._conn.fail_on in sql:
            raise mysql.connector.errors.IntegrityError("Duplicate entry for key 'PRIMARY'")

    def execute(self, sql, params=()):
        self._conn.log.append(("execute", " ".join(sql.split()), tuple(params)))
        self._maybe_fail(sql)
        self._rows = self._conn.results.pop(0) if self._conn.results else []
        self.lastrowid = self._conn.lastrowid
        self.rowcount = self._conn.rowcount

    def executemany(self, sql, seq):
        self._conn.log.append(("executemany", " ".join(sql.split()), list(seq)))
        self._maybe_fail(sql)
        self.rowcount = len(self._conn.log[-1][2])

    def fetchall(self):
        return self._rows

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.log: list = []
        self.results: list = []
        self.lastrowid = 1
        self.rowcount = 1
        self.fail_on: Optional[str] = None
        self.fail_commit = False
        self.fail_start = False
        self.started = False
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def start_transaction(self):
        if self.fail_start:
            raise mysql.connector.errors.OperationalError("Lost connection")
        self.started = True

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        if self.fail_commit:
            raise mysql.connector.errors.OperationalError("Lost connection during commit")
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True

    def statements(self):
        return [entry[1] for entry in self.log]


class FakeConnectionFactory:
    def __init__(self):
        self.conn = FakeConnection()
        self.connects = 0

    def connect(self):
        self.connects += 1
        return self.conn


@pytest.fixture
def mysql_factory() -> FakeConnectionFactory:
    return FakeConnectionFactory()
