"""Exception hierarchy for devtrack.

Every failure a DataStore operation can report is a `DevTrackError`, so the
CLI can tell user-facing problems (a name that does not resolve, a second
running activity) apart from genuine bugs.
"""

from __future__ import annotations


class DevTrackError(Exception):
    """Base exception for all devtrack errors."""


class NotFoundError(DevTrackError):
    """Raised when an id, name or path does not resolve to a stored row."""

    entity = "row"

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"no such {self.entity}: {key}")


class ProjectNotFoundError(NotFoundError):
    entity = "project"


class ActivityTypeNotFoundError(NotFoundError):
    entity = "activity type"


class RepoNotFoundError(NotFoundError):
    entity = "repository"


class ActivityNotFoundError(NotFoundError):
    entity = "activity"


class CountNotFoundError(NotFoundError):
    entity = "count"


class AlreadyExistsError(DevTrackError):
    """Raised when a name or path is already taken."""

    entity = "row"

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"{self.entity} already exists: {key}")


class ProjectAlreadyExistsError(AlreadyExistsError):
    entity = "project"


class ActivityTypeAlreadyExistsError(AlreadyExistsError):
    entity = "activity type"


class RepoAlreadyExistsError(AlreadyExistsError):
    entity = "repository"


class InvalidStateError(DevTrackError):
    """Raised when an operation does not apply to the current state."""


class RunningActivityAlreadyExistsError(InvalidStateError):
    """Raised when a project already has a running activity."""

    def __init__(self, project: str) -> None:
        self.project = project
        super().__init__(f"an activity is already running for project: {project}")


class NoRunningActivityError(InvalidStateError):
    """Raised by callers that require a running activity and found none."""

    def __init__(self, project: str) -> None:
        self.project = project
        super().__init__(f"no activity running for project: {project}")


class EndBeforeStartError(InvalidStateError):
    """Raised when an activity end time would precede its start time."""


class CountError(DevTrackError):
    """Raised when lines of code cannot be counted for a path."""
