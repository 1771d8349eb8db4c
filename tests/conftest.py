from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from devtrack.counting import LineCount
from devtrack.database import get_connection, init_tables
from devtrack.datastore import DataStore

T0 = datetime(2024, 3, 4, 9, 0, 0, tzinfo=UTC)


class FakeClock:
    """Deterministic clock for a DataStore; only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current

    def set(self, when: datetime) -> None:
        self.current = when


class FakeCounter:
    """Line counter returning queued totals and recording what it was asked to count."""

    def __init__(self, totals: Iterable[int] = ()) -> None:
        self.totals = list(totals)
        self.calls: list[tuple[Path, tuple[str, ...]]] = []

    def __call__(self, path: Path, excluded: Iterable[str]) -> LineCount:
        self.calls.append((Path(path), tuple(excluded)))
        total = self.totals.pop(0) if self.totals else 0
        return LineCount({"Python": total})


@pytest.fixture(autouse=True)
def app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Forces test mode and a fixed display zone, and hides any real data file
    configured in the developer's environment.
    Automatically applied to all tests.
    """
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DEVTRACK_TZ", "UTC")
    monkeypatch.delenv("DEVTRACK_DATA_FILE", raising=False)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    A dedicated temp root directory for each test.
    All filesystem writes in tests should be under this root (or tmp_path directly).
    """
    root = tmp_path / "proj"
    (root / "data" / "out").mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def chdir_to_project_root(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Automatically change working directory to project_root for all tests.
    This ensures relative-path operations go into the temp directory by default.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def sqlite_path(project_root: Path) -> Path:
    """
    On-disk SQLite DB under the temp project root (more realistic than :memory:).
    """
    return project_root / "data" / "out" / "test.sqlite"


@pytest.fixture
def db_conn(sqlite_path: Path, project_root: Path) -> Iterator[sqlite3.Connection]:
    """
    A connection to an initialized tracker database, closed after each test.

    The path is asserted to live under project_root so a misconfigured test
    can never write to a real database.
    """
    try:
        sqlite_path.resolve().relative_to(project_root.resolve())
    except ValueError:
        raise AssertionError(
            f"SQLite path {sqlite_path} is not under project_root {project_root}. "
            "This prevents accidental writes to real databases."
        )

    conn = get_connection(sqlite_path)
    try:
        init_tables(conn)
        yield conn
    finally:
        conn.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def counter() -> FakeCounter:
    return FakeCounter()


@pytest.fixture
def store(clock: FakeClock, counter: FakeCounter) -> Iterator[DataStore]:
    """In-memory DataStore driven by the fake clock and counter."""
    with DataStore(None, clock=clock, counter=counter) as ds:
        yield ds
