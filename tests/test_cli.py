"""End-to-end tests of the Typer CLI against a temporary data file."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from devtrack.cli.main import app
from devtrack.datastore import DataStore

pytestmark = pytest.mark.integration

runner = CliRunner()


@pytest.fixture
def invoke(sqlite_path: Path):
    """Run the CLI against the test database."""

    def _invoke(*args: str):
        return runner.invoke(app, ["--data-file", str(sqlite_path), *args])

    return _invoke


@pytest.fixture
def repo_dir(project_root: Path) -> Path:
    repo = project_root / "acme"
    repo.mkdir()
    (repo / "main.py").write_text("a = 1\nb = 2\n")
    return repo


def test_project_lifecycle(invoke, repo_dir: Path, sqlite_path: Path) -> None:
    result = invoke("project", "add", "acme", str(repo_dir))
    assert result.exit_code == 0, result.output
    assert "Added project acme" in result.output

    result = invoke("project", "add", "acme")
    assert result.exit_code == 1
    assert "project already exists: acme" in result.output

    assert invoke("project", "rename", "acme", "widgets").exit_code == 0
    result = invoke("project", "list")
    assert "widgets" in result.output

    with DataStore(sqlite_path) as store:
        project = store.get_project("widgets")
        assert [r.path for r in store.get_repos(project)] == [repo_dir.resolve()]

    assert invoke("project", "delete", "widgets").exit_code == 0
    with DataStore(sqlite_path) as store:
        assert store.get_projects() == []
        assert store.get_all_repos() == []


def test_activity_start_stop(invoke, sqlite_path: Path) -> None:
    assert invoke("project", "add", "acme").exit_code == 0
    assert invoke("type", "add", "coding", "Writing code").exit_code == 0

    result = invoke("activity", "start", "acme", "coding", "parser")
    assert result.exit_code == 0, result.output
    assert "Started coding on acme" in result.output

    result = invoke("activity", "start", "acme", "coding")
    assert result.exit_code == 1
    assert "already running" in result.output

    result = invoke("activity", "list", "acme")
    assert "still running" in result.output

    result = invoke("activity", "stop", "acme")
    assert result.exit_code == 0, result.output
    assert "Stopped activity 1" in result.output

    result = invoke("activity", "stop", "acme")
    assert result.exit_code == 1
    assert "no activity running for project: acme" in result.output

    with DataStore(sqlite_path) as store:
        (activity,) = store.get_activities(store.get_project("acme"))
        assert activity.end is not None
        assert activity.description == "parser"


def test_activity_update_commands(invoke, sqlite_path: Path) -> None:
    invoke("project", "add", "acme")
    invoke("project", "add", "other")
    invoke("type", "add", "coding")
    invoke("type", "add", "research")
    invoke("activity", "start", "acme", "coding")

    assert invoke("activity", "update", "end", "1", "2099-01-01T00:00:00Z").exit_code == 0
    assert invoke("activity", "update", "type", "1", "research").exit_code == 0
    assert invoke("activity", "update", "description", "1", "notes").exit_code == 0
    assert invoke("activity", "update", "project", "1", "other").exit_code == 0

    result = invoke("activity", "update", "end", "1", "2000-01-01T00:00:00Z")
    assert result.exit_code == 1
    assert "before start" in result.output

    result = invoke("activity", "update", "end", "1", "not-a-date")
    assert result.exit_code != 0

    with DataStore(sqlite_path) as store:
        activity = store.get_activity_with_id(1)
        assert activity.atype == store.get_activitytype("research").id
        assert activity.project == store.get_project("other").id
        assert activity.description == "notes"

    result = invoke("activity", "describe", "1")
    assert "Project: other" in result.output
    assert "Activity type: research" in result.output


def test_deleting_type_shows_unknown(invoke) -> None:
    invoke("project", "add", "acme")
    invoke("type", "add", "coding")
    invoke("activity", "start", "acme", "coding")
    assert invoke("type", "delete", "coding").exit_code == 0

    result = invoke("activity", "list", "acme")
    assert "Unknown started at" in result.output

    result = invoke("type", "delete", "Unknown")
    assert result.exit_code == 1


def test_count_and_report(invoke, repo_dir: Path, project_root: Path) -> None:
    invoke("project", "add", "acme", str(repo_dir))
    result = invoke("count", "run", "acme")
    assert result.exit_code == 0, result.output
    assert "has 2 lines of code" in result.output

    result = invoke("report", "show", "acme")
    assert result.exit_code == 0, result.output
    assert result.output.startswith("Report for acme covering period from beginning to now.")
    assert "The total lines of code in the repositories is 2." in result.output

    out_file = project_root / "report.json"
    result = invoke("report", "json", "acme", "--start", "2000-01-01", "--output", str(out_file))
    assert result.exit_code == 0, result.output
    data = json.loads(out_file.read_text())
    assert data["project_name"] == "acme"
    assert data["start"] == "2000-01-01T12:00:00Z"
    assert [c["count"] for c in data["counts"][str(repo_dir.resolve())]] == [2]


def test_unknown_project(invoke) -> None:
    result = invoke("report", "show", "ghost")
    assert result.exit_code == 1
    assert "no such project: ghost" in result.output


def test_db_commands(invoke, sqlite_path: Path) -> None:
    result = invoke("db", "path")
    assert result.output.strip() == str(sqlite_path)

    invoke("project", "add", "acme")
    assert sqlite_path.exists()

    result = invoke("db", "rebuild", "--yes")
    assert result.exit_code == 0, result.output
    with DataStore(sqlite_path) as store:
        assert store.get_projects() == []

    result = invoke("db", "delete", "--yes")
    assert result.exit_code == 0, result.output
    assert not sqlite_path.exists()


def test_data_file_from_environment(sqlite_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEVTRACK_DATA_FILE", str(sqlite_path))
    result = runner.invoke(app, ["project", "add", "acme"])
    assert result.exit_code == 0, result.output
    with DataStore(sqlite_path) as store:
        assert store.get_project("acme") is not None


def test_repo_commands(invoke, repo_dir: Path, project_root: Path) -> None:
    invoke("project", "add", "acme")
    result = invoke("repo", "add", "acme", str(repo_dir))
    assert result.exit_code == 0, result.output

    result = invoke("repo", "add", "acme", str(repo_dir))
    assert result.exit_code == 1
    assert "repository already exists" in result.output

    moved = project_root / "moved"
    assert invoke("repo", "update", str(repo_dir), str(moved)).exit_code == 0
    result = invoke("repo", "list", "acme")
    assert str(moved.resolve()) in result.output

    assert invoke("repo", "delete", str(moved)).exit_code == 0
    result = invoke("repo", "list", "acme")
    assert "No repositories for project acme" in result.output


def test_project_add_with_taken_path_creates_nothing(
    invoke, repo_dir: Path, sqlite_path: Path
) -> None:
    assert invoke("project", "add", "acme", str(repo_dir)).exit_code == 0

    result = invoke("project", "add", "copycat", str(repo_dir))
    assert result.exit_code == 1
    assert "repository already exists" in result.output

    with DataStore(sqlite_path) as store:
        assert store.get_project("copycat") is None
        assert [p.name for p in store.get_projects()] == ["acme"]
