from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from .. import global_config as g
from .base import configure_logging, set_data_file
from .commands.activity import app as activity_app
from .commands.activitytype import app as activitytype_app
from .commands.count import app as count_app
from .commands.db import app as db_app
from .commands.project import app as project_app
from .commands.repo import app as repo_app
from .commands.report import app as report_app

app = typer.Typer(
    help="Track time spent on software projects and how their code grows.",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
)

app.add_typer(project_app, name="project")
app.add_typer(activitytype_app, name="type")
app.add_typer(repo_app, name="repo")
app.add_typer(activity_app, name="activity")
app.add_typer(count_app, name="count")
app.add_typer(report_app, name="report")
app.add_typer(db_app, name="db")


@app.callback()
def root(
    data_file: Annotated[
        Path | None,
        typer.Option(
            "--data-file",
            "-d",
            envvar=g.DATA_FILE_ENV,
            help="SQLite file holding the tracker data",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Log debug output to stderr"),
    ] = False,
) -> None:
    """Track time spent on software projects and how their code grows."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)
    set_data_file(data_file)


def main() -> None:
    """Main entry point for the devtrack CLI.

    Side Effects:
        - Processes CLI arguments and executes commands.
        - May exit with non-zero code on errors.
    """
    app()


if __name__ == "__main__":
    main()
