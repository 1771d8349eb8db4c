"""Project entity: the top-level unit owning repos and activities."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Mapping

from ..database import crud

TABLE = "projects"


@dataclass
class Project:
    """A named project. `id` is 0 until the row has been inserted."""

    name: str
    id: int = 0

    def __str__(self) -> str:
        return self.name


def from_row(row: Mapping[str, Any]) -> Project:
    """Decode a `projects` row."""
    return Project(id=int(row["id"]), name=str(row["name"]))


def create(conn: sqlite3.Connection, project: Project) -> Project:
    """Insert `project` and return it carrying its assigned id."""
    project.id = crud.insert(conn, TABLE, {"name": project.name})
    return project


def get_with_id(conn: sqlite3.Connection, project_id: int) -> Project | None:
    rows = crud.select(conn, TABLE, {"id": project_id})
    return from_row(rows[0]) if rows else None


def get_with_name(conn: sqlite3.Connection, name: str) -> list[Project]:
    return [from_row(row) for row in crud.select(conn, TABLE, {"name": name})]


def get_all(conn: sqlite3.Connection) -> list[Project]:
    return [from_row(row) for row in crud.select(conn, TABLE)]


def update(conn: sqlite3.Connection, project: Project) -> int:
    return crud.update(conn, TABLE, {"id": project.id}, {"name": project.name})


def delete(conn: sqlite3.Connection, project: Project) -> int:
    return crud.delete(conn, TABLE, {"id": project.id})
