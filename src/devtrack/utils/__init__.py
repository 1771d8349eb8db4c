"""Utility modules.

This package provides shared utilities used across the codebase.
"""

from .time import (
    AmbiguousLocalTimeError,
    NonexistentLocalTimeError,
    display_zone,
    format_ts_for_display,
    format_ts_utc_z,
    local_naive_to_utc,
    parse_cli_datetime,
    parse_ts_utc,
    utc_now,
)

__all__ = [
    "AmbiguousLocalTimeError",
    "NonexistentLocalTimeError",
    "display_zone",
    "format_ts_for_display",
    "format_ts_utc_z",
    "local_naive_to_utc",
    "parse_cli_datetime",
    "parse_ts_utc",
    "utc_now",
]
