"""CLI commands for activities (timed work sessions)."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

import typer

from ...datastore import DataStore
from ...errors import ActivityNotFoundError, NoRunningActivityError
from ...global_config import UNKNOWN_ACTIVITY_TYPE
from ...models import Activity
from ...utils.time import format_ts_for_display, parse_cli_datetime
from ..base import BaseCLI
from ..render import TIME_FMT, activity_line, duration_to_str
from .activitytype import require_activitytype
from .project import require_project

app = typer.Typer(help="Start, stop and edit activities.")
update_app = typer.Typer(help="Edit a recorded activity.")
app.add_typer(update_app, name="update")


def require_activity(store: DataStore, activity_id: int) -> Activity:
    activity = store.get_activity_with_id(activity_id)
    if activity is None:
        raise ActivityNotFoundError(activity_id)
    return activity


def _type_name(store: DataStore, atype: int) -> str:
    at = store.get_activitytype_with_id(atype)
    return at.name if at is not None else UNKNOWN_ACTIVITY_TYPE


class ActivityCLI(BaseCLI):
    """CLI helpers for the activity lifecycle."""

    def __init__(self) -> None:
        super().__init__("activity")

    def start(self, *, project: str, activity_type: str, description: str | None) -> Activity:
        def _start(store: DataStore) -> Activity:
            return store.start_activity(
                require_project(store, project),
                require_activitytype(store, activity_type),
                description,
            )

        return self.handle_cli_operation(
            operation="activity start",
            op_callable=_start,
            render=lambda a: f"✓ Started {activity_type} on {project} (activity {a.id})",
        )

    def stop(self, *, project: str) -> Activity:
        def _stop(store: DataStore) -> Activity:
            stopped = store.stop_running_activity(require_project(store, project))
            if stopped is None:
                raise NoRunningActivityError(project)
            return stopped

        return self.handle_cli_operation(
            operation="activity stop",
            op_callable=_stop,
            render=lambda a: f"✓ Stopped activity {a.id} after {duration_to_str(a.duration())}",
        )

    def cancel(self, *, project: str) -> Activity | None:
        def _cancel(store: DataStore) -> Activity | None:
            return store.cancel_running_activity(require_project(store, project))

        def _render(cancelled: Activity | None) -> str:
            if cancelled is None:
                return f"✓ No activity running for {project}, nothing to cancel"
            return f"✓ Cancelled activity {cancelled.id}"

        return self.handle_cli_operation(
            operation="activity cancel",
            op_callable=_cancel,
            render=_render,
        )

    def update(self, *, operation: str, activity_id: int, apply: Any) -> Activity:
        """Re-fetch activity `activity_id` and hand it to `apply(store, activity)`."""
        return self.handle_cli_operation(
            operation=operation,
            op_callable=lambda store: apply(store, require_activity(store, activity_id)),
            render=lambda a: f"✓ Updated activity {a.id}",
        )


cli = ActivityCLI()


@app.command("start")
def start_command(
    project: Annotated[str, typer.Argument(help="Project name")],
    activity_type: Annotated[str, typer.Argument(help="Activity type name")],
    description: Annotated[str | None, typer.Argument(help="Optional description")] = None,
) -> None:
    """Start timing an activity. Only one activity per project can run at a time."""
    cli.start(project=project, activity_type=activity_type, description=description)


@app.command("stop")
def stop_command(project: Annotated[str, typer.Argument(help="Project name")]) -> None:
    """Stop the running activity of a project."""
    cli.stop(project=project)


@app.command("cancel")
def cancel_command(project: Annotated[str, typer.Argument(help="Project name")]) -> None:
    """Discard the running activity of a project without recording it."""
    cli.cancel(project=project)


@app.command("list")
def list_command(
    project: Annotated[str, typer.Argument(help="Project name")],
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Show ids")] = False,
) -> None:
    """List the activities of a project."""

    def _list(store: DataStore) -> dict[str, Any]:
        activities = store.get_activities(require_project(store, project))
        items = [activity_line(a, _type_name(store, a.atype), verbose=verbose) for a in activities]
        return {"items": items, "empty": f"No activities for project {project} in database"}

    cli.handle_cli_operation(operation="Activities", op_callable=_list)


@app.command("describe")
def describe_command(activity_id: Annotated[int, typer.Argument(help="Activity id")]) -> None:
    """Show the details of one activity."""

    def _describe(store: DataStore) -> dict[str, Any]:
        activity = require_activity(store, activity_id)
        project = store.get_project_with_id(activity.project)
        lines = [
            f"Project: {project.name if project is not None else activity.project}",
            f"Activity type: {_type_name(store, activity.atype)}",
        ]
        if activity.description:
            lines.append(f"Description: {activity.description}")
        lines.append(f"Started: {format_ts_for_display(activity.start, TIME_FMT)}")
        duration = activity.duration()
        if duration is None:
            lines.append("Finished: still running")
        else:
            lines.append(f"Finished: {format_ts_for_display(activity.end, TIME_FMT)}")
            lines.append(f"Duration: {duration_to_str(duration)}")
        return {"lines": lines}

    cli.handle_cli_operation(operation=f"activity {activity_id}", op_callable=_describe)


@app.command("delete")
def delete_command(activity_id: Annotated[int, typer.Argument(help="Activity id")]) -> None:
    """Delete one activity."""
    cli.handle_cli_operation(
        operation="activity delete",
        op_callable=lambda store: store.delete_activity(require_activity(store, activity_id)),
        render=lambda _: f"✓ Deleted activity {activity_id}",
    )


@update_app.command("end")
def update_end_command(
    activity_id: Annotated[int, typer.Argument(help="Activity id")],
    end: Annotated[
        datetime,
        typer.Argument(
            parser=parse_cli_datetime,
            metavar="WHEN",
            help="YYYY-MM-DDTHH:MM local time, YYYY-MM-DD, or a UTC instant ending in Z",
        ),
    ],
) -> None:
    """Set when an activity ended. Must not be before it started."""
    cli.update(
        operation="activity update end",
        activity_id=activity_id,
        apply=lambda store, activity: store.update_activity_end(activity, end),
    )


@update_app.command("type")
def update_type_command(
    activity_id: Annotated[int, typer.Argument(help="Activity id")],
    activity_type: Annotated[str, typer.Argument(help="Activity type name")],
) -> None:
    """Change the activity type of an activity."""
    cli.update(
        operation="activity update type",
        activity_id=activity_id,
        apply=lambda store, activity: store.update_activity_type(
            activity, require_activitytype(store, activity_type)
        ),
    )


@update_app.command("description")
def update_description_command(
    activity_id: Annotated[int, typer.Argument(help="Activity id")],
    description: Annotated[str | None, typer.Argument(help="New description (omit to clear it)")] = None,
) -> None:
    """Change or clear the description of an activity."""
    cli.update(
        operation="activity update description",
        activity_id=activity_id,
        apply=lambda store, activity: store.update_activity_description(activity, description),
    )


@update_app.command("project")
def update_project_command(
    activity_id: Annotated[int, typer.Argument(help="Activity id")],
    project: Annotated[str, typer.Argument(help="Project name")],
) -> None:
    """Move an activity to another project."""
    cli.update(
        operation="activity update project",
        activity_id=activity_id,
        apply=lambda store, activity: store.update_activity_project(
            activity, require_project(store, project)
        ),
    )
