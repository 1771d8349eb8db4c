"""Generic CRUD helpers built on top of the low-level query helpers.

These functions operate on table names and dict-like row data and are
intended to stay low-level and generic. They do *not* open or close
connections; callers are responsible for providing a connection and
managing transaction boundaries.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping

from . import queries
from .errors import from_sqlite_error

logger = logging.getLogger(__name__)


def _validate_identifier(name: str) -> None:
    """Validate SQL identifier to prevent injection.

    Checks that identifier contains only alphanumeric characters and
    underscores. This is a basic safeguard, not comprehensive protection.

    Args:
        name: SQL identifier (table or column name) to validate.

    Raises:
        ValueError: If identifier contains unsafe characters.
    """
    if not name.replace("_", "").isalnum():
        msg = f"Unsafe SQL identifier: {name!r}"
        raise ValueError(msg)


def _quote(name: str) -> str:
    """Validate and double-quote an identifier (columns such as "end" are keywords)."""
    _validate_identifier(name)
    return f'"{name}"'


def _where(filters: Mapping[str, Any]) -> tuple[str, list[Any]]:
    """Build an ANDed WHERE clause; None values compare with IS NULL."""
    clauses: list[str] = []
    params: list[Any] = []
    for col, value in filters.items():
        if value is None:
            clauses.append(f"{_quote(col)} IS NULL")
        else:
            clauses.append(f"{_quote(col)} = ?")
            params.append(value)
    return " AND ".join(clauses), params


def insert(
    conn: sqlite3.Connection,
    table: str,
    data: Mapping[str, Any],
) -> int:
    """Insert a single record into table and return its new id.

    Args:
        conn: Database connection (caller manages transaction).
        table: Table name to insert into.
        data: Column name to value mapping for the new record.

    Returns:
        The rowid SQLite assigned to the inserted record.

    Raises:
        ValueError: If table or column names are invalid.
        IntegrityError: If constraint violation occurs.
        DatabaseError: If database operation fails.

    Logs:
        - DEBUG: "Inserted record into {table}" on success.

    Side Effects:
        - Inserts row into database table.
    """
    payload = dict(data)
    columns = ", ".join(_quote(col) for col in payload)
    placeholders = ", ".join("?" for _ in payload)
    sql = f"INSERT INTO {_quote(table)} ({columns}) VALUES ({placeholders})"  # noqa: S608

    try:
        rowid = queries.execute_insert(conn, sql, tuple(payload.values()))
        logger.debug("Inserted record into %s", table)
        return rowid
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc


def select(
    conn: sqlite3.Connection,
    table: str,
    filters: Mapping[str, Any] | None = None,
    *,
    order_by: str | None = "id",
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Select rows from table using simple equality filters.

    Builds a SELECT query with WHERE clauses for each filter (ANDed together),
    optional ORDER BY, and optional LIMIT. All identifiers are validated.

    Args:
        conn: Database connection.
        table: Table name to query.
        filters: Column name to value mapping for WHERE clauses. A value of
            None matches NULL.
        order_by: Column name to sort by (defaults to id, None for no order).
        limit: Maximum number of rows to return (optional).

    Returns:
        List of dictionaries, one per row, with column names as keys.

    Raises:
        ValueError: If table, column names, or order_by are invalid.
        DatabaseError: If database operation fails.
    """
    sql = f"SELECT * FROM {_quote(table)}"  # noqa: S608
    params: list[Any] = []

    if filters:
        where_sql, params = _where(filters)
        sql += " WHERE " + where_sql

    if order_by:
        sql += f" ORDER BY {_quote(order_by)}"

    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)

    try:
        return queries.fetch_all(conn, sql, tuple(params))
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc


def update(
    conn: sqlite3.Connection,
    table: str,
    filters: Mapping[str, Any],
    values: Mapping[str, Any],
) -> int:
    """Update rows in table matching filters with values.

    Requires at least one filter to prevent accidental full-table updates.

    Args:
        conn: Database connection (caller manages transaction).
        table: Table name to update.
        filters: Column name to value mapping for WHERE clauses. Must not
            be empty.
        values: Column name to value mapping for SET clauses.

    Returns:
        Number of rows affected by the update.

    Raises:
        ValueError: If table/column names are invalid or filters is empty.
        DatabaseError: If database operation fails.

    Side Effects:
        - Updates matching rows in database.
    """
    if not filters:
        msg = "Refusing to perform UPDATE with no filters"
        raise ValueError(msg)
    if not values:
        msg = "Refusing to perform UPDATE with no values"
        raise ValueError(msg)

    set_clauses: list[str] = []
    params: list[Any] = []
    for col, value in values.items():
        set_clauses.append(f"{_quote(col)} = ?")
        params.append(value)

    where_sql, where_params = _where(filters)
    sql = f"UPDATE {_quote(table)} SET " + ", ".join(set_clauses)  # noqa: S608
    sql += " WHERE " + where_sql

    try:
        return queries.execute_update(conn, sql, tuple(params + where_params))
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc


def delete(
    conn: sqlite3.Connection,
    table: str,
    filters: Mapping[str, Any],
) -> int:
    """Delete rows in table matching filters.

    Requires at least one filter to prevent accidental full-table deletes.

    Args:
        conn: Database connection (caller manages transaction).
        table: Table name to delete from.
        filters: Column name to value mapping for WHERE clauses. Must not
            be empty.

    Returns:
        Number of rows deleted.

    Raises:
        ValueError: If table/column names are invalid or filters is empty.
        DatabaseError: If database operation fails.

    Side Effects:
        - Deletes matching rows from database.
    """
    if not filters:
        msg = "Refusing to perform DELETE with no filters"
        raise ValueError(msg)

    where_sql, params = _where(filters)
    sql = f"DELETE FROM {_quote(table)} WHERE " + where_sql  # noqa: S608

    try:
        return queries.execute_update(conn, sql, tuple(params))
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc
