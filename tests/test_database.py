"""Tests for the database layer: schema, CRUD helpers and file management."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from devtrack.database import (
    CURRENT_SCHEMA_VERSION,
    MEMORY_DB,
    DatabaseError,
    delete_database,
    delete,
    get_connection,
    init_tables,
    initialize_database,
    insert,
    rebuild_database,
    resolve_db_path,
    select,
    update,
)
from devtrack.database import queries
from devtrack.datastore import DataStore
from devtrack.errors import DevTrackError


@pytest.mark.integration
class TestSchema:
    """Tests for init_tables and the seeded sentinel type."""

    def test_sentinel_type_is_seeded(self, db_conn: sqlite3.Connection) -> None:
        rows = select(db_conn, "activitytypes")
        assert [(r["id"], r["name"]) for r in rows] == [(0, "Unknown")]

    def test_init_is_idempotent(self, db_conn: sqlite3.Connection) -> None:
        insert(db_conn, "projects", {"name": "acme"})
        db_conn.commit()

        init_tables(db_conn)
        init_tables(db_conn)

        assert len(select(db_conn, "activitytypes")) == 1
        assert [r["name"] for r in select(db_conn, "projects")] == ["acme"]

    def test_schema_version_recorded(self, db_conn: sqlite3.Connection) -> None:
        row = db_conn.execute(
            "SELECT value FROM schema_meta WHERE key = 'schema_version'"
        ).fetchone()
        assert row["value"] == str(CURRENT_SCHEMA_VERSION)

    def test_memory_database(self) -> None:
        conn = get_connection(MEMORY_DB)
        try:
            init_tables(conn)
            assert select(conn, "projects") == []
        finally:
            conn.close()


@pytest.mark.integration
class TestCrud:
    """Tests for the generic CRUD helpers."""

    def test_insert_returns_new_id(self, db_conn: sqlite3.Connection) -> None:
        first = insert(db_conn, "projects", {"name": "a"})
        second = insert(db_conn, "projects", {"name": "b"})
        assert second == first + 1

    def test_keyword_columns_are_quoted(self, db_conn: sqlite3.Connection) -> None:
        insert(
            db_conn,
            "activities",
            {"project": 1, "atype": 0, "start": "2024-01-01T00:00:00Z", "end": None},
        )
        running = select(db_conn, "activities", {"end": None})
        assert len(running) == 1
        assert running[0]["start"] == "2024-01-01T00:00:00Z"

    def test_none_filter_matches_null_only(self, db_conn: sqlite3.Connection) -> None:
        insert(db_conn, "activities", {"project": 1, "start": "2024-01-01T00:00:00Z"})
        insert(
            db_conn,
            "activities",
            {"project": 1, "start": "2024-01-01T00:00:00Z", "end": "2024-01-01T01:00:00Z"},
        )
        assert len(select(db_conn, "activities", {"project": 1})) == 2
        assert len(select(db_conn, "activities", {"project": 1, "end": None})) == 1

    def test_update_and_delete(self, db_conn: sqlite3.Connection) -> None:
        row_id = insert(db_conn, "projects", {"name": "old"})
        assert update(db_conn, "projects", {"id": row_id}, {"name": "new"}) == 1
        assert select(db_conn, "projects", {"id": row_id})[0]["name"] == "new"

        assert delete(db_conn, "projects", {"id": row_id}) == 1
        assert select(db_conn, "projects", {"id": row_id}) == []

    def test_update_requires_filters(self, db_conn: sqlite3.Connection) -> None:
        with pytest.raises(ValueError, match="no filters"):
            update(db_conn, "projects", {}, {"name": "x"})

    def test_unsafe_identifier_rejected(self, db_conn: sqlite3.Connection) -> None:
        with pytest.raises(ValueError, match="Unsafe SQL identifier"):
            select(db_conn, "projects; DROP TABLE projects")


@pytest.mark.integration
class TestDatabaseFile:
    """Tests for resolving, deleting and rebuilding the database file."""

    def test_resolve_prefers_explicit_path(
        self, sqlite_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEVTRACK_DATA_FILE", "/elsewhere/db.sqlite")
        assert resolve_db_path(sqlite_path) == sqlite_path
        assert resolve_db_path() == Path("/elsewhere/db.sqlite")

    def test_delete_database(self, sqlite_path: Path) -> None:
        initialize_database(sqlite_path)
        assert sqlite_path.exists()

        assert delete_database(sqlite_path) is True
        assert not sqlite_path.exists()
        assert delete_database(sqlite_path) is False

    def test_rebuild_drops_data(self, sqlite_path: Path) -> None:
        conn = get_connection(sqlite_path)
        init_tables(conn)
        insert(conn, "projects", {"name": "acme"})
        conn.commit()
        conn.close()

        rebuild_database(sqlite_path)

        conn = get_connection(sqlite_path)
        try:
            assert select(conn, "projects") == []
            assert len(select(conn, "activitytypes")) == 1
        finally:
            conn.close()

    def test_directory_path_raises_database_error(self, project_root: Path) -> None:
        folder = project_root / "not-a-file"
        folder.mkdir()
        with pytest.raises(DatabaseError):
            get_connection(folder)

    def test_datastore_on_directory_is_a_devtrack_error(self, project_root: Path) -> None:
        folder = project_root / "not-a-file"
        folder.mkdir()
        with pytest.raises(DevTrackError):
            DataStore(folder)

    def test_memory_database_cannot_be_deleted(self) -> None:
        with pytest.raises(ValueError):
            delete_database(Path(MEMORY_DB))


@pytest.mark.integration
def test_query_helpers(db_conn: sqlite3.Connection) -> None:
    row_id = queries.execute_insert(db_conn, "INSERT INTO projects (name) VALUES (?)", ("acme",))
    assert queries.fetch_all(db_conn, "SELECT name FROM projects WHERE id = ?", (row_id,)) == [
        {"name": "acme"}
    ]
    assert queries.fetch_all(db_conn, "SELECT name FROM projects WHERE id = ?", (999,)) == []
    assert queries.execute_update(db_conn, "DELETE FROM projects WHERE id = ?", (row_id,)) == 1
