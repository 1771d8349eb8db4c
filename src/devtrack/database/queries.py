"""Thin wrappers over cursor execution used by `crud`.

Each helper runs one parameterized statement on a caller-owned connection
and logs it at DEBUG. Raw `sqlite3.Error`s propagate; `crud` maps them to
`DatabaseError`.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

logger = logging.getLogger(__name__)

Params = tuple | dict | None


def execute_query(conn: sqlite3.Connection, sql: str, params: Params = None) -> sqlite3.Cursor:
    """Run `sql` with `params` and hand back the cursor.

    Logs:
        - DEBUG: the first 80 characters of the statement.
        - ERROR: the sqlite3 failure, with traceback.
    """
    try:
        cursor = conn.execute(sql, params or ())
    except sqlite3.Error:
        logger.exception("Statement failed: %s", sql[:80])
        raise
    logger.debug("Ran: %s", sql[:80])
    return cursor


def fetch_all(conn: sqlite3.Connection, sql: str, params: Params = None) -> list[dict[str, Any]]:
    """Rows of a SELECT as plain dicts keyed by column name."""
    return [dict(row) for row in execute_query(conn, sql, params).fetchall()]


def execute_update(conn: sqlite3.Connection, sql: str, params: Params = None) -> int:
    """Run an UPDATE or DELETE and return how many rows it touched."""
    touched = execute_query(conn, sql, params).rowcount
    logger.debug("%s rows affected", touched)
    return touched


def execute_insert(conn: sqlite3.Connection, sql: str, params: Params = None) -> int:
    """Run an INSERT and return the id SQLite gave the new row."""
    new_id = int(execute_query(conn, sql, params).lastrowid)
    logger.debug("New row id %s", new_id)
    return new_id
