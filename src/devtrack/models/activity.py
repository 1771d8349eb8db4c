"""Activity entity: a timed work session.

An activity is Running while `end` is None and Stopped once `end` is set.
Timestamps are tz-aware UTC datetimes in memory and canonical ...Z strings
at rest.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping

from ..database import crud
from ..utils.time import format_ts_utc_z, parse_ts_utc
from .activitytype import SENTINEL_ID

TABLE = "activities"


@dataclass
class Activity:
    project: int
    start: datetime
    atype: int = SENTINEL_ID
    description: str | None = None
    end: datetime | None = None
    id: int = 0

    @property
    def is_running(self) -> bool:
        return self.end is None

    def duration(self) -> timedelta | None:
        """Return `end - start`, or None while the activity is running."""
        if self.end is None:
            return None
        return self.end - self.start

    def __str__(self) -> str:
        end = format_ts_utc_z(self.end) if self.end is not None else "None"
        return f"{self.id} from {format_ts_utc_z(self.start)} until {end}"


def from_row(row: Mapping[str, Any]) -> Activity:
    """Decode an `activities` row."""
    end = row["end"]
    return Activity(
        id=int(row["id"]),
        project=int(row["project"]),
        atype=int(row["atype"]),
        description=row["description"],
        start=parse_ts_utc(row["start"]),
        end=parse_ts_utc(end) if end is not None else None,
    )


def _values(activity: Activity) -> dict[str, Any]:
    return {
        "project": activity.project,
        "atype": activity.atype,
        "description": activity.description,
        "start": format_ts_utc_z(activity.start),
        "end": format_ts_utc_z(activity.end) if activity.end is not None else None,
    }


def create(conn: sqlite3.Connection, activity: Activity) -> Activity:
    """Insert `activity` and return it carrying its assigned id."""
    activity.id = crud.insert(conn, TABLE, _values(activity))
    return activity


def get_with_id(conn: sqlite3.Connection, activity_id: int) -> Activity | None:
    rows = crud.select(conn, TABLE, {"id": activity_id})
    return from_row(rows[0]) if rows else None


def get_with_project(conn: sqlite3.Connection, project_id: int) -> list[Activity]:
    return [from_row(row) for row in crud.select(conn, TABLE, {"project": project_id})]


def get_with_atype(conn: sqlite3.Connection, atype_id: int) -> list[Activity]:
    return [from_row(row) for row in crud.select(conn, TABLE, {"atype": atype_id})]


def get_running(conn: sqlite3.Connection, project_id: int | None = None) -> list[Activity]:
    """Return running activities, optionally only those of one project."""
    filters: dict[str, Any] = {"end": None}
    if project_id is not None:
        filters["project"] = project_id
    return [from_row(row) for row in crud.select(conn, TABLE, filters)]


def get_all(conn: sqlite3.Connection) -> list[Activity]:
    return [from_row(row) for row in crud.select(conn, TABLE)]


def update(conn: sqlite3.Connection, activity: Activity) -> int:
    return crud.update(conn, TABLE, {"id": activity.id}, _values(activity))


def delete(conn: sqlite3.Connection, activity: Activity) -> int:
    return crud.delete(conn, TABLE, {"id": activity.id})
