"""ActivityType entity: a user-defined category of work."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Mapping

from ..database import crud

TABLE = "activitytypes"

# Reserved id of the "Unknown" activity type seeded by schema.sql
SENTINEL_ID = 0


@dataclass
class ActivityType:
    """A category such as "coding" or "research"."""

    name: str
    description: str | None = None
    id: int = 0

    @property
    def is_sentinel(self) -> bool:
        return self.id == SENTINEL_ID

    def __str__(self) -> str:
        return self.name


def from_row(row: Mapping[str, Any]) -> ActivityType:
    """Decode an `activitytypes` row."""
    return ActivityType(
        id=int(row["id"]),
        name=str(row["name"]),
        description=row["description"],
    )


def create(conn: sqlite3.Connection, at: ActivityType) -> ActivityType:
    """Insert `at` and return it carrying its assigned id."""
    at.id = crud.insert(conn, TABLE, {"name": at.name, "description": at.description})
    return at


def get_with_id(conn: sqlite3.Connection, at_id: int) -> ActivityType | None:
    rows = crud.select(conn, TABLE, {"id": at_id})
    return from_row(rows[0]) if rows else None


def get_with_name(conn: sqlite3.Connection, name: str) -> list[ActivityType]:
    return [from_row(row) for row in crud.select(conn, TABLE, {"name": name})]


def get_all(conn: sqlite3.Connection) -> list[ActivityType]:
    return [from_row(row) for row in crud.select(conn, TABLE)]


def update(conn: sqlite3.Connection, at: ActivityType) -> int:
    return crud.update(
        conn,
        TABLE,
        {"id": at.id},
        {"name": at.name, "description": at.description},
    )


def delete(conn: sqlite3.Connection, at: ActivityType) -> int:
    return crud.delete(conn, TABLE, {"id": at.id})
