from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import EventKind
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_date
from ..database.transaction import Transaction
from .model import Event, OccurredAt, tables_for
from .repository import EventRepository

logger = logging.getLogger(__name__)


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_event(
        self,
        tx: Transaction,
        kind: EventKind,
        occurred_at: OccurredAt,
        *,
        name: Optional[str] = None,
        approved: bool = False,
    ) -> int:
        t = tables_for(kind)
        columns = [f"`{t.occurred_at_column}`", "active"]
        params: list[object] = [occurred_at, True]
        if t.name_column:
            columns.append(t.name_column)
            params.append(name)
        if t.has_approval:
            columns.append("approved")
            params.append(bool(approved))

        tx.run_step(
            f"INSERT INTO {t.event_table} ({', '.join(columns)}) VALUES ({', '.join(['%s'] * len(params))})",
            params,
        )
        event_id = tx.lastrowid
        logger.debug("Inserted %s into db. ID=%s", kind.value, event_id)
        return event_id

    def exists(self, tx: Transaction, kind: EventKind, event_id: int) -> bool:
        t = tables_for(kind)
        rows = tx.fetch_all(f"SELECT id FROM {t.event_table} WHERE id=%s FOR UPDATE", (int(event_id),))
        return bool(rows)

    def delete_event(self, tx: Transaction, kind: EventKind, event_id: int) -> bool:
        t = tables_for(kind)
        tx.run_step(f"DELETE FROM {t.event_table} WHERE id=%s", (int(event_id),))
        return tx.rowcount > 0

    def set_approved(self, tx: Transaction, kind: EventKind, event_id: int, approved: bool) -> bool:
        t = tables_for(kind)
        if not t.has_approval:
            raise ValidationError(f"{kind.value} events have no approval")
        tx.run_step(
            f"UPDATE {t.event_table} SET approved=%s WHERE id=%s",
            (bool(approved), int(event_id)),
        )
        return tx.rowcount > 0

    def list_since(self, kind: EventKind, cutoff: date) -> Sequence[Event]:
        t = tables_for(kind)
        columns = ["id", f"`{t.occurred_at_column}` AS occurred_at", "active"]
        if t.name_column:
            columns.append(f"{t.name_column} AS name")
        if t.has_approval:
            columns.append("approved")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {', '.join(columns)}
                FROM {t.event_table}
                WHERE `{t.occurred_at_column}` > %s
                ORDER BY `{t.occurred_at_column}` ASC, id ASC
                """,
                (cutoff,),
            )
            rows = fetchall(cur)

        return [
            Event(
                event_id=int(r["id"]),
                kind=kind,
                occurred_at=normalize_mysql_date(r["occurred_at"]),
                active=bool(r["active"]),
                approved=bool(r["approved"]) if t.has_approval else None,
                name=r.get("name"),
            )
            for r in rows
        ]
