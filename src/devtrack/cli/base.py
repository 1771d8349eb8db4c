from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer

from ..database import resolve_db_path
from ..datastore import DataStore
from ..errors import DevTrackError

_LOGGING_CONFIGURED = False

# Set once per invocation by the root callback in cli.main
_DATA_FILE: Path | None = None


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure CLI-wide logging once.

    Sets up basic logging configuration for the CLI. Safe to call multiple
    times; only configures on first call.

    Args:
        level: Logging level (defaults to WARNING).

    Side Effects:
        - Configures Python logging module globally.
        - Sets module-level flag to prevent reconfiguration.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger hooked into the shared CLI configuration."""
    return logging.getLogger(name)


def set_data_file(path: Path | None) -> None:
    """Record the --data-file option for this invocation."""
    global _DATA_FILE
    _DATA_FILE = path


def data_file() -> Path:
    """Return the database file selected by --data-file, the environment, or the default."""
    return resolve_db_path(_DATA_FILE)


def open_datastore() -> DataStore:
    return DataStore(data_file())


@contextmanager
def handle_errors(
    operation: str,
    *,
    logger: logging.Logger | None = None,
) -> Generator[None, None, None]:
    """Provide consistent exception handling for CLI operations.

    Context manager that catches exceptions, displays a user-friendly error
    message on stderr, and exits with code 1. Expected failures (any
    `DevTrackError`, or a bad argument value) are not logged with a
    traceback; anything else is. Re-raises typer.Exit to allow normal CLI
    exit flow.

    Args:
        operation: Human-readable operation name for error messages.
        logger: Logger instance. Defaults to module logger if None.

    Raises:
        typer.Exit: Always exits with code 1 on exception (except typer.Exit
            which is re-raised).

    Logs:
        - DEBUG: "{operation} failed: {exc}" for expected failures.
        - ERROR: "Error during {operation}" with full exception traceback
            for unexpected ones.

    User Output:
        - Prints error message via typer.secho() in red: "✗ {operation} failed: {exc}".
    """
    logger = logger or get_logger(__name__)
    try:
        yield
    except typer.Exit:
        raise
    except (DevTrackError, ValueError) as exc:
        logger.debug("%s failed: %s", operation, exc)
        typer.secho(f"✗ {operation} failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error during %s", operation)
        typer.secho(f"✗ {operation} failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


def format_result(result: Any, *, operation: str | None = None) -> str:
    """Format arbitrary result payloads into CLI-friendly text.

    Converts result objects (dict, list, bool, str, None) into formatted
    text suitable for CLI output.

    Args:
        result: Result object to format. Can be dict, list, bool, str,
            or None.
        operation: Optional operation name to include in formatted output.

    Returns:
        Formatted string ready for CLI display.
    """
    op_label = operation or "Result"

    if result is None:
        return f"✓ {op_label}"

    if isinstance(result, bool):
        icon = "✓" if result else "✗"
        return f"{icon} {op_label}"

    if isinstance(result, str):
        return f"{op_label}: {result}"

    if isinstance(result, list):
        rendered_items = "\n".join(f"  • {item}" for item in result)
        return f"{op_label}:\n{rendered_items}" if rendered_items else f"{op_label}: []"

    if isinstance(result, dict):
        return _format_result_dict(result, op_label)

    return f"{op_label}: {result!r}"


class BaseCLI:
    """Utility base class for CLI command groups."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        self.logger = get_logger(__name__)

    def handle_cli_operation(
        self,
        *,
        operation: str,
        op_callable: Callable[[DataStore], Any],
        pre_message: str | None = None,
        render: Callable[[Any], str] | None = None,
    ) -> Any:
        """Run an operation against the DataStore with consistent errors.

        Opens the DataStore, runs the callable with it, closes the store,
        and prints the result.

        Args:
            operation: Human-readable operation name for error handling.
            op_callable: Callable that receives the open DataStore and
                returns a result.
            pre_message: Optional message to display before operation starts.
            render: Optional formatter replacing `format_result`.

        Returns:
            Result from op_callable.

        User Output:
            - Prints pre_message via typer.echo() if provided.
            - Prints the rendered result via typer.echo().
            - Error messages handled by handle_errors context manager.
        """

        def _with_store() -> Any:
            with open_datastore() as store:
                return op_callable(store)

        return self.run_operation(
            operation=operation,
            op_callable=_with_store,
            pre_message=pre_message,
            render=render,
        )

    def run_operation(
        self,
        *,
        operation: str,
        op_callable: Callable[[], Any],
        pre_message: str | None = None,
        render: Callable[[Any], str] | None = None,
    ) -> Any:
        """Run an operation that does not need an open DataStore."""
        if pre_message:
            typer.echo(pre_message)

        with handle_errors(operation, logger=self.logger):
            result = op_callable()

        typer.echo(render(result) if render else format_result(result, operation=operation))
        return result


def _format_result_dict(result: dict[str, Any], op_label: str) -> str:
    """Format a dictionary result into CLI-friendly text.

    Args:
        result: Result dictionary with optional keys: success, message,
            lines, items, empty.
        op_label: Operation label to display.

    Returns:
        Formatted multi-line string.
    """
    icon = "✓" if result.get("success", True) else "✗"
    lines = [f"{icon} {op_label}"]

    message = result.get("message")
    if message:
        lines.append(f"  ℹ {message}")

    for line in result.get("lines") or []:
        lines.append(f"  {line}")

    items = result.get("items")
    if items:
        for item in items:
            lines.append(f"  • {item}")
    elif items is not None and result.get("empty"):
        lines.append(f"  {result['empty']}")

    return "\n".join(lines)
