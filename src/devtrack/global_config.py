"""Global, project-wide configuration constants.

This module intentionally contains **no business logic** – only simple,
shared filesystem anchors and cross-cutting constants that many modules
can import.
"""

from pathlib import Path

import typer

# Core roots
PACKAGE_ROOT: Path = Path(__file__).resolve().parent

# Core Names
APP_NAME = "dev-tracker"

# Data file
DATA_DIR: Path = Path(typer.get_app_dir(APP_NAME))
DATA_FILE_NAME = "dev-tracker.sqlite"
DEFAULT_DATA_FILE: Path = DATA_DIR / DATA_FILE_NAME

# Environment overrides
DATA_FILE_ENV = "DEVTRACK_DATA_FILE"
DISPLAY_TZ_ENV = "DEVTRACK_TZ"

# SQL directory (shipped inside the package)
SQL_DIR: Path = PACKAGE_ROOT / "sql"

# Directory names never descended into when counting lines of code
DEFAULT_EXCLUDED_DIRS: tuple[str, ...] = (
    "target",
    "build",
    "dist",
    "node_modules",
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
)

# Name of the sentinel activity type (id 0)
UNKNOWN_ACTIVITY_TYPE = "Unknown"
