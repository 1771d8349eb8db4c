"""Canonical time and date utilities.

This module provides a single source of truth for all time/date operations:
- Canonical instant strings: YYYY-MM-DDTHH:MM:SSZ (seconds-only, UTC)
- DST-safe naive local timestamp conversion with explicit error handling
- Display helpers that convert UTC instants to the user's zone

All timestamps at rest (the DB, serialized reports) are strings in ...Z format.
Internal operations use tz-aware datetime objects, but boundaries serialize to strings.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, time, tzinfo
from zoneinfo import ZoneInfo

from ..global_config import DISPLAY_TZ_ENV

# Local calendar dates given on the command line resolve to midday
CLI_DATE_TIME = time(12, 0, 0)


class AmbiguousLocalTimeError(ValueError):
    """Raised when a naive local time is ambiguous due to DST fall-back.

    This occurs when a clock "falls back" and the same local time occurs twice.
    We must not guess which occurrence was intended.
    """


class NonexistentLocalTimeError(ValueError):
    """Raised when a naive local time does not exist due to DST spring-forward.

    This occurs when clocks "spring forward" and skip an hour.
    We must not invent a time that never occurred.
    """


def utc_now() -> datetime:
    """Return current UTC time as tz-aware datetime, truncated to seconds.

    Returns:
        Current UTC datetime with timezone.utc.
    """
    return datetime.now(UTC).replace(microsecond=0)


def format_ts_utc_z(dt: datetime) -> str:
    """Format a datetime as canonical UTC instant string (YYYY-MM-DDTHH:MM:SSZ).

    Converts any aware datetime to UTC before formatting.

    Args:
        dt: Datetime to format. Must be timezone-aware. If not UTC, converts to UTC.

    Returns:
        Canonical instant string: YYYY-MM-DDTHH:MM:SSZ (exactly 20 characters).

    Raises:
        ValueError: If dt is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            f"Cannot format naive datetime {dt}. "
            "Provide timezone context or use local_naive_to_utc() first."
        )

    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_ts_utc(s: str) -> datetime:
    """Parse a UTC instant string to tz-aware UTC datetime.

    Accepts both ...Z and explicit offset formats, but normalizes to UTC.

    Args:
        s: Timestamp string (YYYY-MM-DDTHH:MM:SSZ or with a +HH:MM offset).

    Returns:
        Tz-aware UTC datetime object.

    Raises:
        ValueError: If string format is invalid or carries no zone.
    """
    text = s[:-1] + "+00:00" if s.endswith("Z") else s
    try:
        dt = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid timestamp format: {s}") from e

    if dt.tzinfo is None:
        raise ValueError(
            f"Timestamp {s} is naive. Provide UTC timestamp with Z or +00:00."
        )
    return dt.astimezone(UTC)


def display_zone() -> tzinfo | None:
    """Return the zone used for display and for naive command line input.

    Returns:
        ZoneInfo for DEVTRACK_TZ when set, otherwise None (system local zone).

    Raises:
        ValueError: If DEVTRACK_TZ is not a valid IANA zone.
    """
    name = os.environ.get(DISPLAY_TZ_ENV)
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except Exception as e:
        raise ValueError(f"Invalid IANA timezone in {DISPLAY_TZ_ENV}: {name}") from e


def local_naive_to_utc(dt_naive: datetime, *, tz: tzinfo | None = None) -> datetime:
    """Convert a naive local datetime to UTC, with DST ambiguity checks.

    Args:
        dt_naive: Naive datetime (no timezone info).
        tz: Zone to interpret the datetime in. None means the system local zone.

    Returns:
        Tz-aware UTC datetime.

    Raises:
        AmbiguousLocalTimeError: If local time is ambiguous (DST fall-back).
        NonexistentLocalTimeError: If local time does not exist (DST spring-forward).
    """
    if dt_naive.tzinfo is not None:
        raise ValueError(
            f"Expected naive datetime, got timezone-aware: {dt_naive}"
        )

    def _to_utc(fold: int) -> datetime:
        candidate = dt_naive.replace(fold=fold)
        if tz is None:
            return candidate.astimezone(UTC)
        return candidate.replace(tzinfo=tz).astimezone(UTC)

    def _back_to_local(utc_dt: datetime) -> datetime:
        local = utc_dt.astimezone(tz) if tz is not None else utc_dt.astimezone()
        return local.replace(tzinfo=None)

    utc_fold0 = _to_utc(0)
    utc_fold1 = _to_utc(1)
    matches_fold0 = _back_to_local(utc_fold0) == dt_naive
    matches_fold1 = _back_to_local(utc_fold1) == dt_naive

    if utc_fold0 != utc_fold1:
        if matches_fold0 or matches_fold1:
            raise AmbiguousLocalTimeError(f"Ambiguous local time: {dt_naive.isoformat()}")
        raise NonexistentLocalTimeError(f"Nonexistent local time: {dt_naive.isoformat()}")

    if not matches_fold0:
        raise NonexistentLocalTimeError(f"Nonexistent local time: {dt_naive.isoformat()}")

    return utc_fold0


def parse_cli_datetime(s: str) -> datetime:
    """Parse a date or datetime typed on the command line.

    Accepted forms:
    - YYYY-MM-DDTHH:MM (local time)
    - YYYY-MM-DD (midday local time)
    - A full instant with Z or an explicit offset

    Args:
        s: User supplied string.

    Returns:
        Tz-aware UTC datetime object.

    Raises:
        ValueError: If the string matches none of the accepted forms.
    """
    s = s.strip()
    zone = display_zone()

    try:
        naive = datetime.strptime(s, "%Y-%m-%dT%H:%M")
    except ValueError:
        pass
    else:
        return local_naive_to_utc(naive, tz=zone)

    try:
        day = datetime.strptime(s, "%Y-%m-%d")
    except ValueError:
        pass
    else:
        return local_naive_to_utc(datetime.combine(day.date(), CLI_DATE_TIME), tz=zone)

    try:
        return parse_ts_utc(s)
    except ValueError as e:
        raise ValueError(
            f"Invalid date/datetime: {s}. "
            "Expected YYYY-MM-DDTHH:MM, YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ"
        ) from e


def format_ts_for_display(ts_utc: datetime, fmt: str = "%I:%M%p on %A %d %B %Y") -> str:
    """Format a UTC timestamp for human-readable display in the display zone.

    This is a view-only operation; never persist the result.
    """
    if ts_utc.tzinfo is None:
        raise ValueError("Cannot display naive datetime")
    zone = display_zone()
    local = ts_utc.astimezone(zone) if zone is not None else ts_utc.astimezone()
    return local.strftime(fmt)
