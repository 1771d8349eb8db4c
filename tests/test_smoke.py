from __future__ import annotations

import importlib
import sqlite3

import pytest


@pytest.mark.unit
def test_import_package() -> None:
    importlib.import_module("devtrack")


@pytest.mark.unit
def test_import_cli_main() -> None:
    importlib.import_module("devtrack.cli.main")


@pytest.mark.integration
def test_sqlite_smoke(db_conn: sqlite3.Connection) -> None:
    tables = {
        row["name"]
        for row in db_conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    }
    assert {"projects", "activitytypes", "repos", "activities", "counts"} <= tables
