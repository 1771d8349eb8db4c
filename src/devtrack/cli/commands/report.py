"""CLI commands for project reports."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from ...datastore import DataStore
from ...report import Report
from ...utils.time import parse_cli_datetime
from ..base import BaseCLI
from ..render import render_report
from .project import require_project

app = typer.Typer(help="Summarise the activities and counts of a project.")

cli = BaseCLI("report")

StartOption = Annotated[
    datetime | None,
    typer.Option(
        "--start",
        "-s",
        parser=parse_cli_datetime,
        metavar="WHEN",
        help="Only include items at or after WHEN (YYYY-MM-DD, YYYY-MM-DDTHH:MM or UTC instant)",
    ),
]
EndOption = Annotated[
    datetime | None,
    typer.Option(
        "--end",
        "-e",
        parser=parse_cli_datetime,
        metavar="WHEN",
        help="Only include items at or before WHEN",
    ),
]


def _build(project: str, start: datetime | None, end: datetime | None):
    def _report(store: DataStore) -> Report:
        if start is not None and end is not None and end < start:
            raise ValueError("--end is before --start")
        return store.create_report(require_project(store, project), start, end)

    return _report


@app.command("show")
def show_command(
    project: Annotated[str, typer.Argument(help="Project name")],
    start: StartOption = None,
    end: EndOption = None,
) -> None:
    """Print a readable report of a project."""
    cli.handle_cli_operation(
        operation="report",
        op_callable=_build(project, start, end),
        render=render_report,
    )


@app.command("json")
def json_command(
    project: Annotated[str, typer.Argument(help="Project name")],
    start: StartOption = None,
    end: EndOption = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the JSON to this file instead of stdout"),
    ] = None,
) -> None:
    """Print (or save) a project report as JSON."""

    def _render(report: Report) -> str:
        text = report.to_json()
        if output is None:
            return text
        output.write_text(text + "\n", encoding="utf-8")
        return f"✓ Wrote report for {report.project_name} to {output}"

    cli.handle_cli_operation(
        operation="report json",
        op_callable=_build(project, start, end),
        render=_render,
    )
