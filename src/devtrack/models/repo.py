"""Repo entity: a filesystem location attached to a project."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from ..database import crud

TABLE = "repos"


@dataclass
class Repo:
    """A repository path belonging to project `project`."""

    project: int
    path: Path
    id: int = 0

    def __str__(self) -> str:
        return str(self.path)


def from_row(row: Mapping[str, Any]) -> Repo:
    """Decode a `repos` row."""
    return Repo(id=int(row["id"]), project=int(row["project"]), path=Path(row["path"]))


def _values(repo: Repo) -> dict[str, Any]:
    return {"project": repo.project, "path": str(repo.path)}


def create(conn: sqlite3.Connection, repo: Repo) -> Repo:
    """Insert `repo` and return it carrying its assigned id."""
    repo.id = crud.insert(conn, TABLE, _values(repo))
    return repo


def get_with_id(conn: sqlite3.Connection, repo_id: int) -> Repo | None:
    rows = crud.select(conn, TABLE, {"id": repo_id})
    return from_row(rows[0]) if rows else None


def get_with_path(conn: sqlite3.Connection, path: Path | str) -> list[Repo]:
    return [from_row(row) for row in crud.select(conn, TABLE, {"path": str(path)})]


def get_with_project(conn: sqlite3.Connection, project_id: int) -> list[Repo]:
    return [from_row(row) for row in crud.select(conn, TABLE, {"project": project_id})]


def get_all(conn: sqlite3.Connection) -> list[Repo]:
    return [from_row(row) for row in crud.select(conn, TABLE)]


def update(conn: sqlite3.Connection, repo: Repo) -> int:
    return crud.update(conn, TABLE, {"id": repo.id}, _values(repo))


def delete(conn: sqlite3.Connection, repo: Repo) -> int:
    return crud.delete(conn, TABLE, {"id": repo.id})
