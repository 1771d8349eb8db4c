"""Database initialization using the packaged schema SQL file.

This module is responsible for creating the tracker tables (or ensuring an
existing database already has them) by executing `sql/schema.sql`, and for
maintaining a minimal `schema_meta` table with a `schema_version` value.
"""

from __future__ import annotations

import errno
import logging
import sqlite3
from pathlib import Path

from .. import global_config as g

from .connection import MEMORY_DB, execute_script, get_connection, resolve_db_path
from .errors import DatabaseLockedError, from_sqlite_error

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1


def _schema_path() -> Path:
    """Return path to schema.sql file."""
    return g.SQL_DIR / "schema.sql"


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Upsert the schema_version entry in schema_meta.

    Args:
        conn: Database connection.
        version: Schema version number to record.

    Side Effects:
        - Creates schema_meta table if needed.
        - Inserts or updates schema_version entry.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        INSERT INTO schema_meta (key, value)
        VALUES ('schema_version', ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """,
        (str(version),),
    )


def init_tables(conn: sqlite3.Connection) -> None:
    """Create all tables on an open connection if they are absent.

    Safe to run on a new database or re-run on an existing one: schema.sql
    only uses CREATE TABLE IF NOT EXISTS and INSERT OR IGNORE, so the
    sentinel activity type (id 0) is seeded exactly once.

    Args:
        conn: Database connection. The caller keeps ownership.

    Raises:
        FileNotFoundError: If schema.sql doesn't exist.
        DatabaseError: If SQL execution fails.

    Side Effects:
        - Executes schema.sql and records the schema version.
        - Commits.
    """
    schema_file = _schema_path()
    if not schema_file.exists():
        msg = f"Schema file not found: {schema_file}"
        raise FileNotFoundError(msg)

    try:
        execute_script(conn, schema_file.read_text(encoding="utf-8"), description="schema.sql")
        _set_schema_version(conn, CURRENT_SCHEMA_VERSION)
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise from_sqlite_error(exc) from exc


def initialize_database(db_path: Path | None = None) -> None:
    """Initialize a database file using `schema.sql`.

    Args:
        db_path: Path to SQLite database file. Defaults to resolve_db_path().

    Raises:
        FileNotFoundError: If schema.sql doesn't exist.
        DatabaseError: If SQL execution fails.

    Logs:
        - INFO: "Database initialization complete (schema_version={version})"
            on success.

    Side Effects:
        - Creates database file if it doesn't exist.
    """
    conn = get_connection(db_path=db_path)
    try:
        init_tables(conn)
        logger.info("Database initialization complete (schema_version=%s)", CURRENT_SCHEMA_VERSION)
    finally:
        conn.close()


def delete_database(db_path: Path | None = None) -> bool:
    """Delete a SQLite database file and its rollback journal.

    Args:
        db_path: Path to SQLite database file. Defaults to resolve_db_path().

    Returns:
        True if a database file was removed, False if none existed.

    Raises:
        DatabaseLockedError: If any file deletion fails because the database
            is locked or in use.
        OSError: If deletion fails for other reasons (permissions, etc.).

    Logs:
        - INFO: "Attempting to delete database at {path}" at start.
        - INFO: "Database deleted successfully" on success.
        - ERROR: "Failed to delete {path}" with details on failure.
    """
    resolved = resolve_db_path(db_path)
    if str(resolved) == MEMORY_DB:
        raise ValueError("An in-memory database cannot be deleted")

    logger.info("Attempting to delete database at %s", resolved)

    if not resolved.exists():
        logger.info("Database does not exist (already deleted)")
        return False

    files_to_delete = [
        resolved,
        resolved.with_name(resolved.name + "-journal"),
    ]

    failed_files: list[tuple[Path, str]] = []
    for file_path in files_to_delete:
        if not file_path.exists():
            continue
        try:
            file_path.unlink()
            logger.debug("Deleted %s", file_path)
        except OSError as exc:
            if exc.errno == errno.EBUSY or "locked" in str(exc).lower():
                failed_files.append((file_path, "locked"))
                logger.error("Failed to delete %s: database is locked", file_path)
            else:
                failed_files.append((file_path, str(exc)))
                logger.error("Failed to delete %s: %s", file_path, exc)

    if failed_files:
        if any(reason == "locked" for _, reason in failed_files):
            msg = "Database is in use; close all processes using it and retry."
            raise DatabaseLockedError(msg)
        error_details = "; ".join(f"{f.name}: {reason}" for f, reason in failed_files)
        raise OSError(f"Failed to delete database files: {error_details}")

    logger.info("Database deleted successfully")
    return True


def rebuild_database(db_path: Path | None = None) -> None:
    """Delete and rebuild a database from scratch.

    Raises:
        DatabaseLockedError: If deletion fails because database is in use.
        DatabaseError: If initialization fails.

    Side Effects:
        - Deletes the existing database file.
        - Creates a fresh database holding only the sentinel activity type.
    """
    logger.info("Rebuilding database")
    delete_database(db_path=db_path)
    initialize_database(db_path=db_path)
