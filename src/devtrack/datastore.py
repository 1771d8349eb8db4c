"""The DataStore: single entry point to the tracker database.

A DataStore owns one SQLite connection for its lifetime and coordinates the
entity modules in `devtrack.models`. It enforces the rules no single table
can: unique project/type names and repo paths, existence of referenced rows,
cascading deletes, and at most one running activity per project.

Every mutating method re-fetches the target row by id before writing, so a
stale in-memory copy can never resurrect a deleted row. Each write commits
on its own; a cascade is a sequence of such writes, not one transaction.
Uniqueness checks are check-then-insert and assume a single writer.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from . import global_config as g
from .counting import LineCount, count_lines
from .database import MEMORY_DB, get_connection, init_tables, transaction
from .errors import (
    ActivityNotFoundError,
    ActivityTypeAlreadyExistsError,
    ActivityTypeNotFoundError,
    CountNotFoundError,
    EndBeforeStartError,
    InvalidStateError,
    ProjectAlreadyExistsError,
    ProjectNotFoundError,
    RepoAlreadyExistsError,
    RepoNotFoundError,
    RunningActivityAlreadyExistsError,
)
from .models import activity as activity_table
from .models import activitytype as activitytype_table
from .models import count as count_table
from .models import project as project_table
from .models import repo as repo_table
from .models import Activity, ActivityType, Count, Project, Repo
from .report import Report, build_report
from .utils.time import utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Counter = Callable[[Path, Iterable[str]], LineCount]


def _single(rows: list[Any]) -> Any | None:
    """Return the only element of `rows`, or None for zero or duplicate matches."""
    return rows[0] if len(rows) == 1 else None


def _require_aware(dt: datetime, what: str) -> datetime:
    if dt.tzinfo is None:
        raise ValueError(f"{what} must be timezone-aware, got naive datetime {dt}")
    return dt


class DataStore:
    """Façade over the tracker tables.

    Args:
        db_path: SQLite file to open (created if missing). None opens a
            private in-memory database.
        clock: Returns the current tz-aware UTC time. Used for activity
            start/stop and count dates.
        counter: Line-counting collaborator, called as
            `counter(path, excluded)`.
        excluded: Directory names the counter must skip.
    """

    def __init__(
        self,
        db_path: Path | str | None = None,
        *,
        clock: Clock = utc_now,
        counter: Counter = count_lines,
        excluded: Iterable[str] = g.DEFAULT_EXCLUDED_DIRS,
    ) -> None:
        self.db_path = MEMORY_DB if db_path is None else db_path
        self._clock = clock
        self._counter = counter
        self._excluded = tuple(excluded)
        self._conn: sqlite3.Connection = get_connection(self.db_path)
        init_tables(self._conn)
        logger.debug("DataStore opened (%s)", self.db_path)

    def close(self) -> None:
        self._conn.close()
        logger.debug("DataStore closed (%s)", self.db_path)

    def __enter__(self) -> DataStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def now(self) -> datetime:
        return self._clock()

    def _write(self):
        return transaction(existing_connection=self._conn)

    # ------------------------------------------------------------------
    # Re-fetch helpers

    def _require_project(self, project: Project) -> Project:
        current = project_table.get_with_id(self._conn, project.id)
        if current is None:
            raise ProjectNotFoundError(project.id)
        return current

    def _require_activitytype(self, at: ActivityType) -> ActivityType:
        current = activitytype_table.get_with_id(self._conn, at.id)
        if current is None:
            raise ActivityTypeNotFoundError(at.id)
        return current

    def _require_repo(self, repo: Repo) -> Repo:
        current = repo_table.get_with_id(self._conn, repo.id)
        if current is None:
            raise RepoNotFoundError(repo.id)
        return current

    def _require_activity(self, activity: Activity) -> Activity:
        current = activity_table.get_with_id(self._conn, activity.id)
        if current is None:
            raise ActivityNotFoundError(activity.id)
        return current

    def _require_count(self, count: Count) -> Count:
        current = count_table.get_with_id(self._conn, count.id)
        if current is None:
            raise CountNotFoundError(count.id)
        return current

    # ------------------------------------------------------------------
    # Projects

    def create_project(self, name: str) -> Project:
        """Create a project with a unique, non-empty name.

        Raises:
            ValueError: If `name` is empty.
            ProjectAlreadyExistsError: If a project already has this name.
        """
        if not name:
            raise ValueError("project name must not be empty")
        if project_table.get_with_name(self._conn, name):
            raise ProjectAlreadyExistsError(name)

        with self._write():
            project = project_table.create(self._conn, Project(name=name))
        logger.info("Created project %s (id=%s)", project.name, project.id)
        return project

    def delete_project(self, project: Project) -> None:
        """Delete a project with all of its activities, repos and counts.

        Children are removed one by one through `delete_activity` and
        `delete_repo` before the project row itself.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
        """
        current = self._require_project(project)

        for activity in activity_table.get_with_project(self._conn, current.id):
            self.delete_activity(activity)
        for repo in repo_table.get_with_project(self._conn, current.id):
            self.delete_repo(repo)

        with self._write():
            project_table.delete(self._conn, current)
        logger.info("Deleted project %s (id=%s)", current.name, current.id)

    def update_project(self, project: Project) -> Project:
        """Persist the name held by `project`.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
            ProjectAlreadyExistsError: If another project already has the name.
        """
        current = self._require_project(project)
        if not project.name:
            raise ValueError("project name must not be empty")
        if any(p.id != current.id for p in project_table.get_with_name(self._conn, project.name)):
            raise ProjectAlreadyExistsError(project.name)

        current.name = project.name
        with self._write():
            project_table.update(self._conn, current)
        logger.info("Updated project id=%s (name=%s)", current.id, current.name)
        return current

    def rename_project(self, old: str, new: str) -> Project:
        """Rename project `old` to `new`.

        Raises:
            ProjectNotFoundError: If no project is named `old`.
            ProjectAlreadyExistsError: If a project is already named `new`.
        """
        current = self.get_project(old)
        if current is None:
            raise ProjectNotFoundError(old)
        if project_table.get_with_name(self._conn, new):
            raise ProjectAlreadyExistsError(new)
        return self.update_project(Project(id=current.id, name=new))

    def get_project(self, name: str) -> Project | None:
        """Return the project named `name`, or None unless exactly one matches."""
        return _single(project_table.get_with_name(self._conn, name))

    def get_project_with_id(self, project_id: int) -> Project | None:
        return project_table.get_with_id(self._conn, project_id)

    def get_projects(self) -> list[Project]:
        return project_table.get_all(self._conn)

    # ------------------------------------------------------------------
    # Activity types

    def create_activitytype(self, name: str, description: str | None = None) -> ActivityType:
        """Create an activity type with a unique, non-empty name.

        Raises:
            ValueError: If `name` is empty.
            ActivityTypeAlreadyExistsError: If the name is taken.
        """
        if not name:
            raise ValueError("activity type name must not be empty")
        if activitytype_table.get_with_name(self._conn, name):
            raise ActivityTypeAlreadyExistsError(name)

        with self._write():
            at = activitytype_table.create(
                self._conn, ActivityType(name=name, description=description)
            )
        logger.info("Created activity type %s (id=%s)", at.name, at.id)
        return at

    def delete_activitytype(self, at: ActivityType) -> None:
        """Delete an activity type, re-pointing its activities to "Unknown".

        Every activity that references the type is moved to the sentinel
        type (id 0) and saved before the type row is removed, so no activity
        is ever left pointing at a missing type.

        Raises:
            ActivityTypeNotFoundError: If the type id does not resolve.
            InvalidStateError: If `at` is the sentinel type itself.
        """
        current = self._require_activitytype(at)
        if current.is_sentinel:
            raise InvalidStateError(
                f"the '{current.name}' activity type is reserved and cannot be deleted"
            )

        for activity in activity_table.get_with_atype(self._conn, current.id):
            activity.atype = activitytype_table.SENTINEL_ID
            with self._write():
                activity_table.update(self._conn, activity)
            logger.debug("Activity id=%s moved to the sentinel activity type", activity.id)

        with self._write():
            activitytype_table.delete(self._conn, current)
        logger.info("Deleted activity type %s (id=%s)", current.name, current.id)

    def update_activitytype(self, at: ActivityType) -> ActivityType:
        """Persist the name and description held by `at`.

        Raises:
            ActivityTypeNotFoundError: If the type id does not resolve.
            ActivityTypeAlreadyExistsError: If another type already has the name.
            InvalidStateError: If `at` renames the sentinel type.
        """
        current = self._require_activitytype(at)
        if not at.name:
            raise ValueError("activity type name must not be empty")
        if current.is_sentinel and at.name != current.name:
            raise InvalidStateError(
                f"the '{current.name}' activity type is reserved and cannot be renamed"
            )
        if any(t.id != current.id for t in activitytype_table.get_with_name(self._conn, at.name)):
            raise ActivityTypeAlreadyExistsError(at.name)

        current.name = at.name
        current.description = at.description
        with self._write():
            activitytype_table.update(self._conn, current)
        logger.info("Updated activity type id=%s (name=%s)", current.id, current.name)
        return current

    def rename_activitytype(self, old: str, new: str) -> ActivityType:
        current = self.get_activitytype(old)
        if current is None:
            raise ActivityTypeNotFoundError(old)
        if activitytype_table.get_with_name(self._conn, new):
            raise ActivityTypeAlreadyExistsError(new)
        current.name = new
        return self.update_activitytype(current)

    def get_activitytype(self, name: str) -> ActivityType | None:
        return _single(activitytype_table.get_with_name(self._conn, name))

    def get_activitytype_with_id(self, at_id: int) -> ActivityType | None:
        return activitytype_table.get_with_id(self._conn, at_id)

    def get_activitytypes(self) -> list[ActivityType]:
        return activitytype_table.get_all(self._conn)

    # ------------------------------------------------------------------
    # Repos

    def create_repo(self, project: Project, path: Path | str) -> Repo:
        """Attach the repository at `path` to `project`.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
            RepoAlreadyExistsError: If any project already has a repo at `path`.
        """
        current = self._require_project(project)
        path = Path(path)
        if repo_table.get_with_path(self._conn, path):
            raise RepoAlreadyExistsError(path)

        with self._write():
            repo = repo_table.create(self._conn, Repo(project=current.id, path=path))
        logger.info("Created repo %s for project %s (id=%s)", repo.path, current.name, repo.id)
        return repo

    def delete_repo(self, repo: Repo) -> None:
        """Delete a repo and, one by one, all of its counts.

        Raises:
            RepoNotFoundError: If the repo id does not resolve.
        """
        current = self._require_repo(repo)

        for count in count_table.get_with_repo(self._conn, current.id):
            self.delete_count(count)

        with self._write():
            repo_table.delete(self._conn, current)
        logger.info("Deleted repo %s (id=%s)", current.path, current.id)

    def update_repo(self, repo: Repo) -> Repo:
        """Persist the path and owning project held by `repo`.

        Raises:
            RepoNotFoundError: If the repo id does not resolve.
            ProjectNotFoundError: If the new owning project does not resolve.
            RepoAlreadyExistsError: If another repo already has the path.
        """
        current = self._require_repo(repo)
        owner = project_table.get_with_id(self._conn, repo.project)
        if owner is None:
            raise ProjectNotFoundError(repo.project)
        if any(r.id != current.id for r in repo_table.get_with_path(self._conn, repo.path)):
            raise RepoAlreadyExistsError(repo.path)

        current.path = Path(repo.path)
        current.project = repo.project
        with self._write():
            repo_table.update(self._conn, current)
        logger.info("Updated repo id=%s (path=%s)", current.id, current.path)
        return current

    def get_repo(self, path: Path | str) -> Repo | None:
        return _single(repo_table.get_with_path(self._conn, path))

    def get_repo_with_id(self, repo_id: int) -> Repo | None:
        return repo_table.get_with_id(self._conn, repo_id)

    def get_repos(self, project: Project) -> list[Repo]:
        """Return the repos of `project`.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
        """
        current = self._require_project(project)
        return repo_table.get_with_project(self._conn, current.id)

    def get_all_repos(self) -> list[Repo]:
        return repo_table.get_all(self._conn)

    # ------------------------------------------------------------------
    # Activities

    def start_activity(
        self,
        project: Project,
        at: ActivityType,
        description: str | None = None,
    ) -> Activity:
        """Start a new running activity for `project`, beginning now.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
            ActivityTypeNotFoundError: If the activity type id does not resolve.
            RunningActivityAlreadyExistsError: If the project already has a
                running activity.
        """
        current = self._require_project(project)
        current_at = self._require_activitytype(at)
        if activity_table.get_running(self._conn, current.id):
            raise RunningActivityAlreadyExistsError(current.name)

        activity = Activity(
            project=current.id,
            atype=current_at.id,
            description=description,
            start=self._clock(),
        )
        with self._write():
            activity_table.create(self._conn, activity)
        logger.info(
            "Started %s activity for project %s (id=%s)", current_at.name, current.name, activity.id
        )
        return activity

    def get_running_activity(self, project: Project) -> Activity | None:
        """Return the running activity of `project`, if any.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
        """
        current = self._require_project(project)
        running = activity_table.get_running(self._conn, current.id)
        if len(running) > 1:
            logger.warning(
                "Project %s has %d running activities; using the newest", current.name, len(running)
            )
        return running[-1] if running else None

    def stop_running_activity(self, project: Project) -> Activity | None:
        """Stop the running activity of `project` at the current time.

        Returns:
            The stopped activity, or None when nothing was running.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
        """
        running = self.get_running_activity(project)
        if running is None:
            return None

        running.end = max(self._clock(), running.start)
        with self._write():
            activity_table.update(self._conn, running)
        logger.info("Stopped activity id=%s", running.id)
        return running

    def cancel_running_activity(self, project: Project) -> Activity | None:
        """Discard the running activity of `project` without recording it.

        Returns:
            The deleted activity, or None when nothing was running.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
        """
        running = self.get_running_activity(project)
        if running is None:
            return None

        with self._write():
            activity_table.delete(self._conn, running)
        logger.info("Cancelled activity id=%s", running.id)
        return running

    def get_activity_with_id(self, activity_id: int) -> Activity | None:
        return activity_table.get_with_id(self._conn, activity_id)

    def get_activities(self, project: Project) -> list[Activity]:
        """Return all activities of `project` in id order.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
        """
        current = self._require_project(project)
        return activity_table.get_with_project(self._conn, current.id)

    def update_activity(self, activity: Activity) -> Activity:
        """Validate and persist every field of `activity`.

        Raises:
            ActivityNotFoundError: If the activity id does not resolve.
            ProjectNotFoundError: If the referenced project does not resolve.
            ActivityTypeNotFoundError: If the referenced type does not resolve.
            ValueError: If `start` or `end` is a naive datetime.
            EndBeforeStartError: If `end` precedes `start`.
            RunningActivityAlreadyExistsError: If the result would leave a
                project with two running activities.
        """
        _require_aware(activity.start, "activity start")
        if activity.end is not None:
            _require_aware(activity.end, "activity end")
        current = self._require_activity(activity)
        project = project_table.get_with_id(self._conn, activity.project)
        if project is None:
            raise ProjectNotFoundError(activity.project)
        if activitytype_table.get_with_id(self._conn, activity.atype) is None:
            raise ActivityTypeNotFoundError(activity.atype)
        if activity.end is not None and activity.end < activity.start:
            raise EndBeforeStartError(
                f"end time {activity.end.isoformat()} is before start time {activity.start.isoformat()}"
            )
        if activity.end is None:
            others = [
                a for a in activity_table.get_running(self._conn, project.id) if a.id != current.id
            ]
            if others:
                raise RunningActivityAlreadyExistsError(project.name)

        updated = Activity(
            id=current.id,
            project=activity.project,
            atype=activity.atype,
            description=activity.description,
            start=activity.start,
            end=activity.end,
        )
        with self._write():
            activity_table.update(self._conn, updated)
        logger.info("Updated activity id=%s", updated.id)
        return updated

    def update_activity_description(self, activity: Activity, description: str | None) -> Activity:
        current = self._require_activity(activity)
        current.description = description
        return self.update_activity(current)

    def update_activity_type(self, activity: Activity, at: ActivityType) -> Activity:
        current = self._require_activity(activity)
        current.atype = self._require_activitytype(at).id
        return self.update_activity(current)

    def update_activity_project(self, activity: Activity, project: Project) -> Activity:
        current = self._require_activity(activity)
        current.project = self._require_project(project).id
        return self.update_activity(current)

    def update_activity_end(self, activity: Activity, end: datetime) -> Activity:
        """Set the end time of an activity, stopping it if it was running.

        The stored row is left untouched when validation fails.

        Raises:
            ActivityNotFoundError: If the activity id does not resolve.
            ValueError: If `end` is a naive datetime.
            EndBeforeStartError: If `end` precedes the activity start.
        """
        current = self._require_activity(activity)
        current.end = end
        return self.update_activity(current)

    def delete_activity(self, activity: Activity) -> None:
        current = self._require_activity(activity)
        with self._write():
            activity_table.delete(self._conn, current)
        logger.info("Deleted activity id=%s", current.id)

    # ------------------------------------------------------------------
    # Counts

    def create_count(self, repo: Repo) -> Count:
        """Count the lines of code in `repo` now and store the total.

        Raises:
            RepoNotFoundError: If the repo id does not resolve.
            CountError: If the repo path cannot be counted.
        """
        current = self._require_repo(repo)
        measured = self._counter(current.path, self._excluded)

        count = Count(repo=current.id, date=self._clock(), count=measured.total)
        with self._write():
            count_table.create(self._conn, count)
        logger.info("Counted %s lines in %s (count id=%s)", count.count, current.path, count.id)
        return count

    def get_count_with_id(self, count_id: int) -> Count | None:
        return count_table.get_with_id(self._conn, count_id)

    def get_counts(self, repo: Repo) -> list[Count]:
        """Return the counts of `repo` in id order.

        Raises:
            RepoNotFoundError: If the repo id does not resolve.
        """
        current = self._require_repo(repo)
        return count_table.get_with_repo(self._conn, current.id)

    def get_latest_count(self, repo: Repo) -> Count | None:
        """Return the count with the latest date; equal dates go to the higher id."""
        counts = self.get_counts(repo)
        if not counts:
            return None
        return max(counts, key=lambda c: (c.date, c.id))

    def delete_count(self, count: Count) -> None:
        current = self._require_count(count)
        with self._write():
            count_table.delete(self._conn, current)
        logger.info("Deleted count id=%s", current.id)

    def get_total_loc(self, count: Count) -> int:
        return self._require_count(count).total_lines

    # ------------------------------------------------------------------
    # Reports

    def create_report(
        self,
        project: Project,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Report:
        """Build the activity and count report of `project` for `[start, end]`.

        Raises:
            ProjectNotFoundError: If the project id does not resolve.
            ValueError: If `start` or `end` is a naive datetime.
        """
        if start is not None:
            _require_aware(start, "report start")
        if end is not None:
            _require_aware(end, "report end")
        return build_report(self, project, start, end, now=self._clock())
