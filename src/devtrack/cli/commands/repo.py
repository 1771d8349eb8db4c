"""CLI commands for repositories."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

from ...datastore import DataStore
from ...errors import RepoAlreadyExistsError, RepoNotFoundError
from ...models import Repo
from ..base import BaseCLI
from .project import require_project

app = typer.Typer(help="Attach repositories to projects.")


def normalize_path(path: Path) -> Path:
    """Absolute, user-expanded form under which repo paths are stored."""
    return path.expanduser().resolve()


def require_repo(store: DataStore, path: Path) -> Repo:
    repo = store.get_repo(normalize_path(path))
    if repo is None:
        raise RepoNotFoundError(path)
    return repo


cli = BaseCLI("repo")


@app.command("add")
def add_command(
    project: Annotated[str, typer.Argument(help="Project name")],
    path: Annotated[Path, typer.Argument(help="Repository directory")],
) -> None:
    """Attach a repository directory to a project."""

    def _add(store: DataStore) -> Repo:
        return store.create_repo(require_project(store, project), normalize_path(path))

    cli.handle_cli_operation(
        operation="repo add",
        op_callable=_add,
        render=lambda repo: f"✓ Added repository {repo.path} to {project}",
    )


@app.command("delete")
def delete_command(path: Annotated[Path, typer.Argument(help="Repository directory")]) -> None:
    """Forget a repository and all of its line counts."""

    def _delete(store: DataStore) -> Repo:
        repo = require_repo(store, path)
        store.delete_repo(repo)
        return repo

    cli.handle_cli_operation(
        operation="repo delete",
        op_callable=_delete,
        render=lambda repo: f"✓ Deleted repository {repo.path}",
    )


@app.command("update")
def update_command(
    old_path: Annotated[Path, typer.Argument(help="Current repository directory")],
    new_path: Annotated[Path, typer.Argument(help="New repository directory")],
) -> None:
    """Point a repository at a new directory, keeping its counts."""

    def _update(store: DataStore) -> Repo:
        repo = require_repo(store, old_path)
        target = normalize_path(new_path)
        if store.get_repo(target) is not None:
            raise RepoAlreadyExistsError(target)
        repo.path = target
        return store.update_repo(repo)

    cli.handle_cli_operation(
        operation="repo update",
        op_callable=_update,
        render=lambda repo: f"✓ Repository is now at {repo.path}",
    )


@app.command("list")
def list_command(
    project: Annotated[str, typer.Argument(help="Project name")],
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Show ids")] = False,
) -> None:
    """List the repositories of a project."""

    def _list(store: DataStore) -> dict[str, Any]:
        repos = store.get_repos(require_project(store, project))
        items = [f"{r.id}. {r.path}" if verbose else str(r.path) for r in repos]
        return {"items": items, "empty": f"No repositories for project {project} in database"}

    cli.handle_cli_operation(operation="Repositories", op_callable=_list)
