"""Schema bootstrap for ``database/schema.sql``.

The schema file may carry its own ``CREATE DATABASE``/``USE`` lines; those are
dropped so the configured database name always wins.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterator, Mapping

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_DB_LEVEL = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def _server_connection(config: DBConfig, *, select_db: bool):
    params = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "use_pure": True,
    }
    if select_db:
        params["database"] = config.database
    return mysql.connector.connect(**params)


def clean_schema_sql(text: str) -> str:
    return _LINE_COMMENT.sub("", _DB_LEVEL.sub("", text))


def split_statements(sql: str) -> Iterator[str]:
    """Yield ``;``-terminated statements, ignoring ``;`` inside quoted strings."""

    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if ch == "\\" and quote:
            i += 2
            continue
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def ensure_database_exists(config: DBConfig) -> None:
    conn = _server_connection(config, select_db=False)
    try:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping[str, Any], *, schema_path: str | Path) -> int:
    """Create the database if needed and run every schema statement.

    Statements are ``CREATE TABLE IF NOT EXISTS`` so re-running is harmless.
    Returns the number of statements executed.
    """

    config = DBConfig.from_settings(db_config)
    ensure_database_exists(config)
    statements = list(split_statements(clean_schema_sql(Path(schema_path).read_text(encoding="utf-8"))))

    conn = _server_connection(config, select_db=True)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()

    logger.info("Applied %d schema statements to %s", len(statements), config.database)
    return len(statements)


def list_tables(db_config: Mapping[str, Any]) -> list[str]:
    conn = _server_connection(DBConfig.from_settings(db_config), select_db=True)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
