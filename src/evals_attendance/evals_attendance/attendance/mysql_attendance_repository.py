from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Sequence, Tuple

from ..attendees.identifier import Attendee, Population, attendee_key, population_of
from ..core.enums import AttendanceStatus, EventKind, StatusPredicate
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_date, placeholders
from ..database.transaction import Transaction
from ..events.model import OccurredAt, tables_for
from .model import FroshRow, MemberRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_PREDICATES = {
    StatusPredicate.ABSENT: ("=", AttendanceStatus.ABSENT),
    StatusPredicate.NOT_ATTENDED: ("<>", AttendanceStatus.ATTENDED),
    StatusPredicate.ATTENDED: ("=", AttendanceStatus.ATTENDED),
}


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def write_batch(
        self,
        tx: Transaction,
        kind: EventKind,
        event_id: int,
        frosh: Sequence[FroshRow],
        members: Sequence[MemberRow],
    ) -> None:
        t = tables_for(kind)
        for population, rows in ((Population.FROSH, frosh), (Population.MEMBER, members)):
            # Zero-row INSERTs are not valid SQL.
            if not rows:
                continue
            table, column = t.attendance_table(population)
            tx.run_batch(
                f"INSERT INTO {table} ({column}, {t.event_fk}, attendance_status) VALUES (%s, %s, %s)",
                [(key, int(event_id), AttendanceStatus(status).value) for key, status in rows],
            )
        logger.debug(
            "Added attendance to %s %s (frosh=%d, members=%d)", kind.value, event_id, len(frosh), len(members)
        )

    def delete_for_event(self, tx: Transaction, kind: EventKind, event_id: int) -> None:
        t = tables_for(kind)
        tx.run_step(f"DELETE FROM {t.frosh_table} WHERE {t.event_fk}=%s", (int(event_id),))
        tx.run_step(f"DELETE FROM {t.member_table} WHERE {t.event_fk}=%s", (int(event_id),))
        logger.debug("Finished deleting existing attendance for %s %s", kind.value, event_id)

    def replace_batch(
        self,
        tx: Transaction,
        kind: EventKind,
        event_id: int,
        frosh: Sequence[FroshRow],
        members: Sequence[MemberRow],
    ) -> None:
        self.delete_for_event(tx, kind, event_id)
        self.write_batch(tx, kind, event_id, frosh, members)

    def query_by_attendee(
        self,
        kind: EventKind,
        attendee: Attendee,
        cutoff: date,
        predicate: StatusPredicate,
        *,
        approved_only: bool = False,
    ) -> List[OccurredAt]:
        t = tables_for(kind)
        table, column = t.attendance_table(population_of(attendee))
        op, status = _PREDICATES[StatusPredicate(predicate)]

        clauses = [
            f"a.{column}=%s",
            f"e.`{t.occurred_at_column}` > %s",
            f"a.attendance_status {op} %s",
        ]
        params: list[object] = [attendee_key(attendee), cutoff, status.value]
        if approved_only and t.has_approval:
            clauses.append("e.approved")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT e.`{t.occurred_at_column}` AS occurred_at
                FROM {t.event_table} e
                JOIN {table} a ON a.{t.event_fk} = e.id
                WHERE {' AND '.join(clauses)}
                ORDER BY e.`{t.occurred_at_column}` ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)
        return [normalize_mysql_date(r["occurred_at"]) for r in rows]

    def attendance_for_events(
        self, kind: EventKind, event_ids: Sequence[int]
    ) -> Dict[int, Tuple[List[FroshRow], List[MemberRow]]]:
        result: Dict[int, Tuple[List[FroshRow], List[MemberRow]]] = {int(i): ([], []) for i in event_ids}
        if not result:
            return result

        t = tables_for(kind)
        ids = list(result)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {t.event_fk} AS event_id, fid, attendance_status
                FROM {t.frosh_table}
                WHERE {t.event_fk} IN ({placeholders(ids)})
                ORDER BY fid ASC
                """,
                tuple(ids),
            )
            for r in fetchall(cur):
                result[int(r["event_id"])][0].append((int(r["fid"]), AttendanceStatus(r["attendance_status"])))

            cur.execute(
                f"""
                SELECT {t.event_fk} AS event_id, uid, attendance_status
                FROM {t.member_table}
                WHERE {t.event_fk} IN ({placeholders(ids)})
                ORDER BY uid ASC
                """,
                tuple(ids),
            )
            for r in fetchall(cur):
                result[int(r["event_id"])][1].append((str(r["uid"]), AttendanceStatus(r["attendance_status"])))
        return result
