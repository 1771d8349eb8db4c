"""Database connection helpers.

This module provides a small, synchronous API for obtaining SQLite
connections configured for a local, single-user tracker database.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from .. import global_config as g
from .errors import from_sqlite_error

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def resolve_db_path(db_path: Path | str | None = None) -> Path:
    """Resolve which database file to use.

    Resolution order: explicit path, then the DEVTRACK_DATA_FILE environment
    variable, then the per-user application directory.

    Args:
        db_path: Explicit path, typically from a command line option.

    Returns:
        Path to the SQLite database file.
    """
    if db_path is not None:
        return Path(db_path)
    from_env = os.environ.get(g.DATA_FILE_ENV)
    if from_env:
        return Path(from_env)
    return g.DEFAULT_DATA_FILE


def _ensure_parent_dir(db_path: Path) -> None:
    """Ensure the parent directory for a database file exists.

    Args:
        db_path: Path to database file whose parent directory should exist.

    Side Effects:
        - Creates parent directory if it doesn't exist (with parents=True).
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _configure_connection(conn: sqlite3.Connection) -> None:
    """Apply standard pragmas and row factory to a new connection.

    Configures the connection for use with the project by:
    - Setting row_factory to sqlite3.Row for dict-like access
    - Enabling foreign key constraints

    Args:
        conn: SQLite connection to configure.

    Side Effects:
        - Modifies connection settings (row_factory, pragmas).
    """
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    # Using default DELETE journal mode (no WAL) since this is single-user.


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """Return a configured SQLite connection.

    Creates a new SQLite connection with standard configuration (row factory,
    foreign keys enabled). Ensures parent directory exists before creating
    the database file. Passing ":memory:" opens a private in-memory database.

    Args:
        db_path: Path to SQLite database file. Defaults to resolve_db_path().

    Returns:
        Configured SQLite connection ready for use.

    Raises:
        DatabaseError: If SQLite cannot open or configure the file.

    Logs:
        - DEBUG: "Opening SQLite database at {path}" when creating connection.

    Side Effects:
        - Creates parent directory if it doesn't exist.
        - Creates database file if it doesn't exist.
    """
    if db_path == MEMORY_DB:
        logger.debug("Opening in-memory SQLite database")
        target = MEMORY_DB
    else:
        resolved = resolve_db_path(db_path)
        _ensure_parent_dir(resolved)
        logger.debug("Opening SQLite database at %s", resolved)
        target = str(resolved)
    try:
        conn = sqlite3.connect(target)
        _configure_connection(conn)
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc
    return conn


@contextlib.contextmanager
def transaction(
    db_path: Path | None = None,
    existing_connection: sqlite3.Connection | None = None,
) -> Iterator[sqlite3.Connection]:
    """Context manager for a transactional connection block.

    Manages transaction boundaries (commit on success, rollback on error).
    If an existing connection is provided, it is reused and not closed.
    Otherwise, creates and closes a new connection.

    Args:
        db_path: Path to database file (only used if existing_connection
            is None). Defaults to resolve_db_path().
        existing_connection: Existing connection to reuse. If None, creates
            a new connection that will be closed on exit.

    Yields:
        SQLite connection ready for database operations.

    Logs:
        - DEBUG: "Beginning transaction" at start
        - DEBUG: "Transaction committed" on success
        - ERROR: "Transaction rolled back due to error" on failure
        - DEBUG: "Connection closed" when closing owned connection.

    Side Effects:
        - Commits transaction on successful exit.
        - Rolls back transaction on exception.
        - Closes connection if it was created by this function.
    """
    owns_connection = existing_connection is None
    conn = existing_connection or get_connection(db_path=db_path)

    try:
        logger.debug("Beginning transaction")
        yield conn
        conn.commit()
        logger.debug("Transaction committed")
    except sqlite3.Error as exc:
        logger.exception("Transaction rolled back due to error")
        conn.rollback()
        raise from_sqlite_error(exc) from exc
    except Exception:
        logger.exception("Transaction rolled back due to error")
        conn.rollback()
        raise
    finally:
        if owns_connection:
            conn.close()
            logger.debug("Connection closed")


def execute_script(conn: sqlite3.Connection, sql: str, *, description: str) -> None:
    """Execute a multi-statement SQL script with logging.

    Args:
        conn: Database connection to execute script on.
        sql: Multi-statement SQL script to execute.
        description: Human-readable description for logging purposes.

    Raises:
        sqlite3.Error: If script execution fails.

    Logs:
        - DEBUG: "Executing SQL script: {description}" before execution.
        - ERROR: "Failed while executing SQL script: {description}" with
            exception details on failure.
    """
    logger.debug("Executing SQL script: %s", description)
    try:
        conn.executescript(sql)
    except sqlite3.Error:
        logger.exception("Failed while executing SQL script: %s", description)
        raise
