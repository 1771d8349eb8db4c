"""CLI commands for activity types."""

from __future__ import annotations

from typing import Annotated, Any

import typer

from ...datastore import DataStore
from ...errors import ActivityTypeNotFoundError
from ...models import ActivityType
from ..base import BaseCLI

app = typer.Typer(help="Manage activity types such as 'coding' or 'research'.")


def require_activitytype(store: DataStore, name: str) -> ActivityType:
    at = store.get_activitytype(name)
    if at is None:
        raise ActivityTypeNotFoundError(name)
    return at


cli = BaseCLI("type")


@app.command("add")
def add_command(
    name: Annotated[str, typer.Argument(help="Unique activity type name")],
    description: Annotated[str | None, typer.Argument(help="Optional description")] = None,
) -> None:
    """Create a new activity type."""
    cli.handle_cli_operation(
        operation="type add",
        op_callable=lambda store: store.create_activitytype(name, description),
        render=lambda at: f"✓ Added activity type {at.name}",
    )


@app.command("delete")
def delete_command(name: Annotated[str, typer.Argument(help="Activity type name")]) -> None:
    """Delete an activity type.

    Activities of this type are kept and reported under 'Unknown'.
    """

    def _delete(store: DataStore) -> None:
        store.delete_activitytype(require_activitytype(store, name))

    cli.handle_cli_operation(
        operation="type delete",
        op_callable=_delete,
        render=lambda _: f"✓ Deleted activity type {name}",
    )


@app.command("rename")
def rename_command(
    old_name: Annotated[str, typer.Argument(help="Current name")],
    new_name: Annotated[str, typer.Argument(help="New name")],
) -> None:
    """Rename an activity type. Fails if the new name is already taken."""
    cli.handle_cli_operation(
        operation="type rename",
        op_callable=lambda store: store.rename_activitytype(old_name, new_name),
        render=lambda at: f"✓ Renamed activity type {old_name} to {at.name}",
    )


@app.command("update")
def update_command(
    name: Annotated[str, typer.Argument(help="Activity type name")],
    description: Annotated[
        str | None, typer.Argument(help="New description (omit to clear it)")
    ] = None,
) -> None:
    """Replace the description of an activity type."""

    def _update(store: DataStore) -> ActivityType:
        at = require_activitytype(store, name)
        at.description = description
        return store.update_activitytype(at)

    cli.handle_cli_operation(
        operation="type update",
        op_callable=_update,
        render=lambda at: f"✓ Updated activity type {at.name}",
    )


@app.command("list")
def list_command(
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Show ids and descriptions")] = False,
) -> None:
    """List all activity types."""

    def _list(store: DataStore) -> dict[str, Any]:
        items = []
        for at in store.get_activitytypes():
            if verbose:
                suffix = f" - {at.description}" if at.description else ""
                items.append(f"{at.id}. {at.name}{suffix}")
            else:
                items.append(at.name)
        return {"items": items, "empty": "No activity types in database"}

    cli.handle_cli_operation(operation="Activity types", op_callable=_list)
