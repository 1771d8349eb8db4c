"""Tests for report assembly, serialization and text rendering."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from devtrack.cli.render import duration_to_str, minutes_to_str, render_report
from devtrack.datastore import DataStore
from devtrack.errors import ProjectNotFoundError
from devtrack.models import Project
from devtrack.report import Report, in_window, whole_minutes

from conftest import T0, FakeClock, FakeCounter


@pytest.fixture
def acme(store: DataStore, clock: FakeClock, counter: FakeCounter) -> Project:
    """Project "Acme" with one repo, two finished activities and one running.

    Timeline (UTC), starting Monday 2024-03-04 09:00:
    - coding 09:00-10:30 (90 min)
    - research next day 09:00-09:20 (20 min)
    - coding two days later 09:00, still running at 09:45
    - counts of /src/acme: 1000 on day 0, 1250 on day 1
    """
    project = store.create_project("Acme")
    repo = store.create_repo(project, "/src/acme")
    store.create_repo(project, "/src/acme-docs")
    coding = store.create_activitytype("coding")
    research = store.create_activitytype("research")
    counter.totals = [1000, 1250]

    store.start_activity(project, coding)
    clock.advance(minutes=90)
    store.stop_running_activity(project)
    store.create_count(repo)

    clock.set(T0 + timedelta(days=1))
    store.start_activity(project, research)
    clock.advance(minutes=20, seconds=59)
    store.stop_running_activity(project)
    store.create_count(repo)

    clock.set(T0 + timedelta(days=2))
    store.start_activity(project, coding)
    clock.advance(minutes=45)
    return project


@pytest.mark.unit
class TestBuildReport:
    def test_full_report(self, store: DataStore, acme: Project) -> None:
        report = store.create_report(acme)

        assert report.project_name == "Acme"
        assert report.start is None and report.end is None
        assert [(a.name, a.minutes) for a in report.activities] == [
            ("coding", 90),
            ("research", 20),
            ("coding", 45),
        ]
        assert report.total_minutes == 155
        assert [c.count for c in report.counts["/src/acme"]] == [1000, 1250]
        assert report.counts["/src/acme-docs"] == []
        assert report.total_lines == 1250

    def test_window_is_inclusive(self, store: DataStore, acme: Project) -> None:
        day1 = T0 + timedelta(days=1)
        report = store.create_report(acme, start=day1, end=day1 + timedelta(hours=1))

        assert [a.name for a in report.activities] == ["research"]
        assert [c.count for c in report.counts["/src/acme"]] == [1250]

    def test_window_before_everything(self, store: DataStore, acme: Project) -> None:
        report = store.create_report(acme, end=T0 - timedelta(days=1))
        assert report.activities == []
        assert report.latest_counts() == {"/src/acme": None, "/src/acme-docs": None}
        assert report.total_lines == 0

    def test_deleted_type_reported_as_unknown(self, store: DataStore, acme: Project) -> None:
        store.delete_activitytype(store.get_activitytype("research"))
        names = [a.name for a in store.create_report(acme).activities]
        assert names == ["coding", "Unknown", "coding"]

    def test_report_does_not_mutate(self, store: DataStore, acme: Project) -> None:
        before = store.get_activities(acme)
        store.create_report(acme)
        assert store.get_activities(acme) == before
        assert store.get_running_activity(acme) is not None

    def test_naive_bounds_rejected(self, store: DataStore, acme: Project) -> None:
        with pytest.raises(ValueError, match="timezone-aware"):
            store.create_report(acme, start=datetime(2024, 1, 1))
        with pytest.raises(ValueError, match="timezone-aware"):
            store.create_report(acme, end=datetime(2024, 12, 31))

    def test_missing_project(self, store: DataStore) -> None:
        with pytest.raises(ProjectNotFoundError):
            store.create_report(Project(name="ghost", id=99))


@pytest.mark.unit
def test_json_round_trip(store: DataStore, acme: Project) -> None:
    report = store.create_report(acme, start=T0)
    text = report.to_json()

    assert '"start": "2024-03-04T09:00:00Z"' in text
    assert Report.from_json(text) == report


@pytest.mark.unit
def test_render_report(store: DataStore, acme: Project) -> None:
    text = render_report(store.create_report(acme))

    assert text.startswith(
        "Report for Acme covering period from Monday 04 March 2024 to now."
    )
    assert "There were 3 activities recorded with a total time of 2 hours 35 minutes." in text
    assert "coding for 1 hour 30 minutes on Monday 04 March 2024." in text
    assert "The total lines of code in the repositories is 1250." in text
    assert "/src/acme-docs has no count of lines of code." in text


@pytest.mark.unit
def test_render_empty_report() -> None:
    text = render_report(Report(project_name="Empty"))
    assert text.startswith("Report for Empty covering period from beginning to now.")
    assert "There were no activities recorded." in text


@pytest.mark.unit
@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=59), 0),
        (timedelta(minutes=1, seconds=59), 1),
        (timedelta(hours=2), 120),
        (timedelta(seconds=-30), 0),
    ],
)
def test_whole_minutes(delta: timedelta, expected: int) -> None:
    assert whole_minutes(delta) == expected


@pytest.mark.unit
def test_in_window_open_bounds() -> None:
    assert in_window(T0, None, None)
    assert in_window(T0, T0, T0)
    assert not in_window(T0, T0 + timedelta(seconds=1), None)
    assert not in_window(T0, None, T0 - timedelta(seconds=1))


@pytest.mark.unit
def test_duration_text() -> None:
    assert minutes_to_str(0) == "zero hours zero minutes"
    assert minutes_to_str(61) == "1 hour 1 minute"
    assert duration_to_str(timedelta(seconds=30)) == "less than a minute"
    assert duration_to_str(timedelta(hours=3)) == "3 hours"
