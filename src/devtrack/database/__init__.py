"""Public interface for the database package.

This module exposes the main primitives needed by the rest of the
project: connection helpers, initialization entrypoints, and generic
CRUD utilities.
"""

from .connection import MEMORY_DB, get_connection, resolve_db_path, transaction
from .crud import delete, insert, select, update
from .errors import DatabaseError, DatabaseLockedError, IntegrityError
from .init import (
    CURRENT_SCHEMA_VERSION,
    delete_database,
    init_tables,
    initialize_database,
    rebuild_database,
)

__all__ = [
    "MEMORY_DB",
    "get_connection",
    "resolve_db_path",
    "transaction",
    "init_tables",
    "initialize_database",
    "delete_database",
    "rebuild_database",
    "DatabaseError",
    "DatabaseLockedError",
    "IntegrityError",
    "CURRENT_SCHEMA_VERSION",
    "insert",
    "select",
    "update",
    "delete",
]
