"""CLI commands for lines-of-code counts."""

from __future__ import annotations

from typing import Annotated, Any

import typer

from ...datastore import DataStore
from ...errors import CountNotFoundError
from ...models import Count
from ..base import BaseCLI
from ..render import count_line
from .project import require_project

app = typer.Typer(help="Count lines of code in project repositories.")


def require_count(store: DataStore, count_id: int) -> Count:
    count = store.get_count_with_id(count_id)
    if count is None:
        raise CountNotFoundError(count_id)
    return count


def _repo_path(store: DataStore, count: Count) -> str:
    repo = store.get_repo_with_id(count.repo)
    return str(repo.path) if repo is not None else f"repo {count.repo}"


cli = BaseCLI("count")


@app.command("run")
def run_command(project: Annotated[str, typer.Argument(help="Project name")]) -> None:
    """Count the lines of code in every repository of a project now."""

    def _run(store: DataStore) -> dict[str, Any]:
        repos = store.get_repos(require_project(store, project))
        items = []
        for repo in repos:
            count = store.create_count(repo)
            items.append(f"{repo.path} has {count.count} lines of code")
        return {"items": items, "empty": f"Project {project} has no repositories"}

    cli.handle_cli_operation(operation=f"Counted {project}", op_callable=_run)


@app.command("list")
def list_command(
    project: Annotated[str, typer.Argument(help="Project name")],
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Show ids")] = False,
) -> None:
    """List the recorded counts of every repository of a project."""

    def _list(store: DataStore) -> dict[str, Any]:
        items = []
        for repo in store.get_repos(require_project(store, project)):
            items.extend(
                count_line(count, str(repo.path), verbose=verbose) for count in store.get_counts(repo)
            )
        return {"items": items, "empty": f"No counts for project {project} in database"}

    cli.handle_cli_operation(operation="Counts", op_callable=_list)


@app.command("describe")
def describe_command(count_id: Annotated[int, typer.Argument(help="Count id")]) -> None:
    """Show one count."""

    def _describe(store: DataStore) -> dict[str, Any]:
        count = require_count(store, count_id)
        return {"lines": [count_line(count, _repo_path(store, count))]}

    cli.handle_cli_operation(operation=f"count {count_id}", op_callable=_describe)


@app.command("delete")
def delete_command(count_id: Annotated[int, typer.Argument(help="Count id")]) -> None:
    """Delete one count."""
    cli.handle_cli_operation(
        operation="count delete",
        op_callable=lambda store: store.delete_count(require_count(store, count_id)),
        render=lambda _: f"✓ Deleted count {count_id}",
    )
