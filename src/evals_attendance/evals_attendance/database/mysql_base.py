from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Sequence

import mysql.connector

from ..core.exceptions import StoreError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Read-only cursor for single-statement queries.

    Driver errors surface as ``StoreError``; the connection is always closed.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
        except mysql.connector.Error as e:
            raise StoreError(str(e)) from e
        finally:
            cur.close()
    finally:
        conn.close()


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(values: Sequence[Any]) -> str:
    """``%s, %s, ...`` for an IN (...) list."""
    return ", ".join(["%s"] * len(values))


def normalize_mysql_date(value: Any) -> date | datetime:
    """Normalize DATE/DATETIME values across connector implementations.

    mysql-connector returns date/datetime objects, but the pure-python
    implementation can hand back strings for some column types.
    """

    if isinstance(value, (date, datetime)):
        return value

    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return datetime.strptime(text, "%Y-%m-%d").date()
        return datetime.fromisoformat(text)

    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")
