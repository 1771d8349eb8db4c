"""Project reports: activities and line counts aggregated over a time window.

A report is a pure read-side projection built from a DataStore. It holds
plain data only; turning it into text is left to the CLI, and turning it
into JSON is `Report.to_json`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from .errors import ProjectNotFoundError
from .global_config import UNKNOWN_ACTIVITY_TYPE
from .utils.time import format_ts_utc_z, parse_ts_utc

if TYPE_CHECKING:
    from .datastore import DataStore
    from .models import Project

logger = logging.getLogger(__name__)

START_DEFAULT_LABEL = "beginning"
END_DEFAULT_LABEL = "now"


@dataclass
class ReportActivity:
    name: str
    start: datetime
    minutes: int


@dataclass
class ReportCount:
    date: datetime
    count: int


@dataclass
class Report:
    """Activities and counts for one project within `[start, end]`.

    Attributes:
        project_name: Name of the reported project.
        start: Inclusive lower bound, or None for "from the beginning".
        end: Inclusive upper bound, or None for "until now".
        activities: Activities whose start falls in the window, by start time.
        counts: Repo path to the counts whose date falls in the window, by date.
            Every repo of the project has a key, even when it has no counts.
    """

    project_name: str
    start: datetime | None = None
    end: datetime | None = None
    activities: list[ReportActivity] = field(default_factory=list)
    counts: dict[str, list[ReportCount]] = field(default_factory=dict)

    @property
    def start_label(self) -> str:
        return format_ts_utc_z(self.start) if self.start is not None else START_DEFAULT_LABEL

    @property
    def end_label(self) -> str:
        return format_ts_utc_z(self.end) if self.end is not None else END_DEFAULT_LABEL

    @property
    def total_minutes(self) -> int:
        return sum(a.minutes for a in self.activities)

    def latest_counts(self) -> dict[str, ReportCount | None]:
        """Return the most recent count in the window for every repo path."""
        return {path: (counts[-1] if counts else None) for path, counts in self.counts.items()}

    @property
    def total_lines(self) -> int:
        return sum(c.count for c in self.latest_counts().values() if c is not None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible data with canonical UTC timestamps."""
        return {
            "start": format_ts_utc_z(self.start) if self.start is not None else None,
            "end": format_ts_utc_z(self.end) if self.end is not None else None,
            "project_name": self.project_name,
            "activities": [
                {"name": a.name, "start": format_ts_utc_z(a.start), "minutes": a.minutes}
                for a in self.activities
            ],
            "counts": {
                path: [{"date": format_ts_utc_z(c.date), "count": c.count} for c in counts]
                for path, counts in self.counts.items()
            },
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        """Inverse of `to_dict`.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a timestamp is malformed.
        """
        start = data.get("start")
        end = data.get("end")
        return cls(
            project_name=data["project_name"],
            start=parse_ts_utc(start) if start is not None else None,
            end=parse_ts_utc(end) if end is not None else None,
            activities=[
                ReportActivity(
                    name=a["name"],
                    start=parse_ts_utc(a["start"]),
                    minutes=int(a["minutes"]),
                )
                for a in data.get("activities", [])
            ],
            counts={
                path: [ReportCount(date=parse_ts_utc(c["date"]), count=int(c["count"])) for c in counts]
                for path, counts in data.get("counts", {}).items()
            },
        )

    @classmethod
    def from_json(cls, text: str) -> Report:
        return cls.from_dict(json.loads(text))


def in_window(ts: datetime, start: datetime | None, end: datetime | None) -> bool:
    """Return True if `ts` lies in `[start, end]`; a None bound is open."""
    if start is not None and ts < start:
        return False
    if end is not None and ts > end:
        return False
    return True


def whole_minutes(delta: timedelta) -> int:
    """Whole minutes in `delta`, rounded down and never negative."""
    return max(0, int(delta.total_seconds() // 60))


def build_report(
    store: DataStore,
    project: Project,
    start: datetime | None = None,
    end: datetime | None = None,
    *,
    now: datetime | None = None,
) -> Report:
    """Assemble the report for `project` without mutating anything.

    Running activities are measured up to `now`. An activity whose type no
    longer resolves is reported under the "Unknown" name.

    Args:
        store: Open DataStore to read from.
        project: Project to report on; re-fetched by id.
        start: Inclusive lower bound on activity start and count date.
        end: Inclusive upper bound on activity start and count date.
        now: Reference time for running activities. Defaults to the store clock.

    Returns:
        The assembled Report.

    Raises:
        ProjectNotFoundError: If the project id does not resolve.

    Logs:
        - DEBUG: "Built report for {name}: {n} activities, {m} repos".
    """
    current = store.get_project_with_id(project.id)
    if current is None:
        raise ProjectNotFoundError(project.id)
    now = now or store.now()

    report = Report(project_name=current.name, start=start, end=end)

    type_names = {at.id: at.name for at in store.get_activitytypes()}
    activities = sorted(store.get_activities(current), key=lambda a: (a.start, a.id))
    for activity in activities:
        if not in_window(activity.start, start, end):
            continue
        finished = activity.end if activity.end is not None else now
        report.activities.append(
            ReportActivity(
                name=type_names.get(activity.atype, UNKNOWN_ACTIVITY_TYPE),
                start=activity.start,
                minutes=whole_minutes(finished - activity.start),
            )
        )

    for repo in store.get_repos(current):
        counts = sorted(store.get_counts(repo), key=lambda c: (c.date, c.id))
        report.counts[str(repo.path)] = [
            ReportCount(date=c.date, count=c.count) for c in counts if in_window(c.date, start, end)
        ]

    logger.debug(
        "Built report for %s: %d activities, %d repos",
        current.name,
        len(report.activities),
        len(report.counts),
    )
    return report
