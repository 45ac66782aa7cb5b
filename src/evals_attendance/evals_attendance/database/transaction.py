from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Sequence

import mysql.connector

from ..core.exceptions import CommitError, StoreError, TransactionError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


class Transaction:
    """One open transaction, threaded through the steps of a write sequence.

    Steps run strictly one after another on a single cursor. A failing step
    raises ``StoreError``; the surrounding ``open_transaction`` block then
    rolls back, so callers never issue ROLLBACK themselves.
    """

    def __init__(self, conn, cur):
        self._conn = conn
        self._cur = cur
        self.steps = 0

    @property
    def lastrowid(self) -> int:
        return int(self._cur.lastrowid)

    @property
    def rowcount(self) -> int:
        return int(self._cur.rowcount)

    def run_step(self, sql: str, params: Sequence[Any] = ()) -> "Transaction":
        self.steps += 1
        try:
            self._cur.execute(sql, tuple(params))
        except mysql.connector.Error as e:
            logger.warning("Step %d failed: %s", self.steps, e)
            raise StoreError(str(e)) from e
        return self

    def run_batch(self, sql: str, rows: Sequence[Sequence[Any]]) -> "Transaction":
        """Insert every row with one set-oriented statement.

        mysql-connector rewrites ``INSERT ... VALUES (%s, ...)`` under
        ``executemany`` into a single multi-row INSERT.
        """

        self.steps += 1
        try:
            self._cur.executemany(sql, [tuple(r) for r in rows])
        except mysql.connector.Error as e:
            logger.warning("Batch step %d failed: %s", self.steps, e)
            raise StoreError(str(e)) from e
        return self

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        self.run_step(sql, params)
        return list(self._cur.fetchall() or [])


class TransactionManager:
    """Opens request-scoped transactions against a connection factory."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def begin(self):
        return open_transaction(self._conn_factory)


@contextmanager
def open_transaction(conn_factory: DatabaseConnection) -> Iterator[Transaction]:
    """All-or-nothing scope: commit on clean exit, roll back on any exception.

    The connection is closed on every exit path.
    """

    conn = conn_factory.connect()
    try:
        try:
            conn.start_transaction()
            cur = conn.cursor(dictionary=True)
        except mysql.connector.Error as e:
            raise TransactionError(f"Could not open transaction: {e}") from e
        logger.debug("Acquired transaction")

        tx = Transaction(conn, cur)
        try:
            yield tx
        except BaseException:
            _rollback(conn)
            raise
        finally:
            cur.close()

        try:
            conn.commit()
        except mysql.connector.Error as e:
            logger.error("Transaction failed to commit")
            _rollback(conn)
            raise CommitError(str(e)) from e
        logger.debug("Committed transaction after %d steps", tx.steps)
    finally:
        conn.close()


def _rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error as e:
        # Closing the connection discards the transaction anyway.
        logger.warning("Rollback failed: %s", e)
