"""CLI commands for projects."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

from ...datastore import DataStore
from ...errors import ProjectNotFoundError, RepoAlreadyExistsError
from ...models import Project
from ..base import BaseCLI

app = typer.Typer(help="Add, rename, inspect and delete projects.")


def require_project(store: DataStore, name: str) -> Project:
    """Look a project up by name, raising ProjectNotFoundError if absent."""
    project = store.get_project(name)
    if project is None:
        raise ProjectNotFoundError(name)
    return project


class ProjectCLI(BaseCLI):
    """CLI helpers for project management."""

    def __init__(self) -> None:
        super().__init__("project")

    def add(self, *, name: str, path: Path | None) -> Project:
        """Create a project, optionally registering its first repository."""

        def _add(store: DataStore) -> Project:
            repo_path = path.expanduser().resolve() if path is not None else None
            # A taken path must fail before the project row is written
            if repo_path is not None and store.get_repo(repo_path) is not None:
                raise RepoAlreadyExistsError(repo_path)
            project = store.create_project(name)
            if repo_path is not None:
                store.create_repo(project, repo_path)
            return project

        return self.handle_cli_operation(
            operation="project add",
            op_callable=_add,
            render=lambda p: f"✓ Added project {p.name}",
        )

    def delete(self, *, name: str) -> None:
        def _delete(store: DataStore) -> None:
            store.delete_project(require_project(store, name))

        self.handle_cli_operation(
            operation="project delete",
            op_callable=_delete,
            render=lambda _: f"✓ Deleted project {name}",
        )

    def rename(self, *, old_name: str, new_name: str) -> None:
        self.handle_cli_operation(
            operation="project rename",
            op_callable=lambda store: store.rename_project(old_name, new_name),
            render=lambda p: f"✓ Renamed project {old_name} to {p.name}",
        )

    def list_projects(self, *, verbose: bool) -> dict[str, Any]:
        def _list(store: DataStore) -> dict[str, Any]:
            items = [f"{p.id}. {p.name}" if verbose else p.name for p in store.get_projects()]
            return {"items": items, "empty": "No projects in database"}

        return self.handle_cli_operation(operation="Projects", op_callable=_list)

    def describe(self, *, name: str) -> dict[str, Any]:
        """Summarize a project: repositories with latest counts, activities per type."""

        def _describe(store: DataStore) -> dict[str, Any]:
            project = require_project(store, name)
            lines = [f"Project name '{project.name}'"]

            repos = store.get_repos(project)
            for repo in repos:
                lines.append(f"Repository path '{repo.path}'")
                latest = store.get_latest_count(repo)
                if latest is not None:
                    lines.append(f"  {latest.count} lines of code")
            if not repos:
                lines.append("No repositories")

            activities = store.get_activities(project)
            if not activities:
                lines.append("No activities")
            else:
                lines.append(f"Total activity count {len(activities)}")
                for at in store.get_activitytypes():
                    n = sum(1 for a in activities if a.atype == at.id)
                    if n:
                        noun = "activity" if n == 1 else "activities"
                        lines.append(f"Activity type '{at.name}' has {n} {noun}")
            return {"lines": lines}

        return self.handle_cli_operation(operation="project describe", op_callable=_describe)


cli = ProjectCLI()


@app.command("add")
def add_command(
    name: Annotated[str, typer.Argument(help="Unique project name")],
    path: Annotated[
        Path | None,
        typer.Argument(help="Optional repository path to attach to the new project"),
    ] = None,
) -> None:
    """Create a new project."""
    cli.add(name=name, path=path)


@app.command("delete")
def delete_command(name: Annotated[str, typer.Argument(help="Project name")]) -> None:
    """Delete a project together with its activities, repositories and counts."""
    cli.delete(name=name)


@app.command("rename")
def rename_command(
    old_name: Annotated[str, typer.Argument(help="Current project name")],
    new_name: Annotated[str, typer.Argument(help="New project name")],
) -> None:
    """Rename a project. Fails if the new name is already taken."""
    cli.rename(old_name=old_name, new_name=new_name)


@app.command("list")
def list_command(
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Show ids")] = False,
) -> None:
    """List all projects."""
    cli.list_projects(verbose=verbose)


@app.command("describe")
def describe_command(name: Annotated[str, typer.Argument(help="Project name")]) -> None:
    """Show repositories, latest line counts and activity totals for a project."""
    cli.describe(name=name)
