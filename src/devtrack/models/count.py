"""Count entity: a point-in-time lines-of-code measurement for a repo."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from ..database import crud
from ..utils.time import format_ts_utc_z, parse_ts_utc

TABLE = "counts"


@dataclass
class Count:
    repo: int
    date: datetime
    count: int
    id: int = 0

    @property
    def total_lines(self) -> int:
        return self.count

    def __str__(self) -> str:
        return f"{self.id} {self.repo} {format_ts_utc_z(self.date)} {self.count}"


def from_row(row: Mapping[str, Any]) -> Count:
    """Decode a `counts` row."""
    return Count(
        id=int(row["id"]),
        repo=int(row["repo"]),
        date=parse_ts_utc(row["date"]),
        count=int(row["count"]),
    )


def create(conn: sqlite3.Connection, count: Count) -> Count:
    """Insert `count` and return it carrying its assigned id."""
    count.id = crud.insert(
        conn,
        TABLE,
        {"repo": count.repo, "date": format_ts_utc_z(count.date), "count": count.count},
    )
    return count


def get_with_id(conn: sqlite3.Connection, count_id: int) -> Count | None:
    rows = crud.select(conn, TABLE, {"id": count_id})
    return from_row(rows[0]) if rows else None


def get_with_repo(conn: sqlite3.Connection, repo_id: int) -> list[Count]:
    return [from_row(row) for row in crud.select(conn, TABLE, {"repo": repo_id})]


def get_all(conn: sqlite3.Connection) -> list[Count]:
    return [from_row(row) for row in crud.select(conn, TABLE)]


def update(conn: sqlite3.Connection, count: Count) -> int:
    return crud.update(
        conn,
        TABLE,
        {"id": count.id},
        {"repo": count.repo, "date": format_ts_utc_z(count.date), "count": count.count},
    )


def delete(conn: sqlite3.Connection, count: Count) -> int:
    return crud.delete(conn, TABLE, {"id": count.id})
