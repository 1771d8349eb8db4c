"""CLI commands for database management."""

from __future__ import annotations

from typing import Annotated, Any

import typer

from ...database import delete_database, rebuild_database
from ..base import BaseCLI, data_file

app = typer.Typer(help="Database management commands.")


class DatabaseCLI(BaseCLI):
    """CLI helpers for database management."""

    def __init__(self) -> None:
        super().__init__("db")

    def delete_db(self) -> dict[str, Any]:
        """Delete the tracker database file.

        Returns:
            Standardized result dictionary with success status.

        User Output:
            - "Deleting database..." pre-message.
            - Formatted result via BaseCLI.run_operation.
        """
        return self.run_operation(
            operation="db delete",
            op_callable=self._delete_operation,
            pre_message="Deleting database...",
        )

    def rebuild_db(self) -> dict[str, Any]:
        """Delete the tracker database and create an empty one in its place."""
        return self.run_operation(
            operation="db rebuild",
            op_callable=self._rebuild_operation,
            pre_message="Rebuilding database...",
        )

    def path(self) -> str:
        return self.run_operation(
            operation="db path",
            op_callable=lambda: str(data_file()),
            render=str,
        )

    def _delete_operation(self) -> dict[str, Any]:
        target = data_file()
        if delete_database(db_path=target):
            return {"success": True, "message": f"Deleted {target}"}
        return {"success": True, "message": f"No database at {target}"}

    def _rebuild_operation(self) -> dict[str, Any]:
        target = data_file()
        rebuild_database(db_path=target)
        return {"success": True, "message": f"Rebuilt {target}"}


cli = DatabaseCLI()


@app.command("path")
def path_command() -> None:
    """Print the database file in use."""
    cli.path()


@app.command("delete")
def delete_command(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
) -> None:
    """Delete the database file, losing every project, activity and count.

    Exits with code 1 if deletion fails (e.g., database is locked).
    """
    if not yes:
        typer.confirm(f"Delete {data_file()}?", abort=True)
    cli.delete_db()


@app.command("rebuild")
def rebuild_command(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
) -> None:
    """Delete the database and create an empty one from the schema."""
    if not yes:
        typer.confirm(f"Rebuild {data_file()}? All data will be lost", abort=True)
    cli.rebuild_db()
