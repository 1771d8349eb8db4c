"""Database-specific exception types for the project."""

from __future__ import annotations

import sqlite3

from ..errors import DevTrackError


class DatabaseError(DevTrackError):
    """Base exception for database-related errors."""


class IntegrityError(DatabaseError):
    """Raised when a constraint violation occurs."""


class DatabaseLockedError(DatabaseError):
    """Raised when database deletion fails because the database is in use."""


def from_sqlite_error(error: sqlite3.Error) -> DatabaseError:
    """Map a raw sqlite3 error to a project-level DatabaseError.

    IntegrityError is mapped to IntegrityError, all others to DatabaseError.

    Args:
        error: SQLite exception to convert.

    Returns:
        DatabaseError or IntegrityError instance with error message.
    """
    if isinstance(error, sqlite3.IntegrityError):
        return IntegrityError(str(error))
    return DatabaseError(str(error))
