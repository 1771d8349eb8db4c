"""Human-readable text for activities, counts and reports.

Pure formatting; everything here takes already-loaded data and returns
strings. Timestamps are shown in the display zone (DEVTRACK_TZ or the
system local zone).
"""

from __future__ import annotations

from datetime import timedelta

from ..models import Activity, Count
from ..report import Report, whole_minutes
from ..utils.time import format_ts_for_display

DATE_FMT = "%A %d %B %Y"
TIME_FMT = "%I:%M%p on %A %d %B %Y"


def _plural(n: int, unit: str) -> str:
    return f"1 {unit}" if n == 1 else f"{n} {unit}s"


def minutes_to_str(minutes: int) -> str:
    """Render minutes as "H hours M minutes", spelling out zero parts."""
    hours, minutes = divmod(minutes, 60)
    hours_text = _plural(hours, "hour") if hours else "zero hours"
    minutes_text = _plural(minutes, "minute") if minutes else "zero minutes"
    return f"{hours_text} {minutes_text}"


def duration_to_str(duration: timedelta) -> str:
    """Render a duration compactly, omitting zero parts."""
    total = whole_minutes(duration)
    hours, minutes = divmod(total, 60)
    parts = []
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes:
        parts.append(_plural(minutes, "minute"))
    return " ".join(parts) if parts else "less than a minute"


def activity_line(activity: Activity, type_name: str, *, verbose: bool = False) -> str:
    prefix = f"{activity.id}. " if verbose else ""
    started = format_ts_for_display(activity.start, TIME_FMT)
    duration = activity.duration()
    if duration is None:
        return f"{prefix}{type_name} started at {started}, and is still running"
    finished = format_ts_for_display(activity.end, TIME_FMT)
    return f"{prefix}{type_name} from {started} until {finished}, total time {duration_to_str(duration)}"


def count_line(count: Count, path: str, *, verbose: bool = False) -> str:
    prefix = f"{count.id}. " if verbose else ""
    when = format_ts_for_display(count.date, "%A %d %B %Y at %I:%M%p")
    return f"{prefix}{when} {path} has {count.count} lines of code"


def render_report(report: Report) -> str:
    """Render a report as the multi-paragraph text shown by `report show`."""
    if report.start is not None:
        start_phrase = format_ts_for_display(report.start, DATE_FMT)
    elif report.activities:
        start_phrase = format_ts_for_display(report.activities[0].start, DATE_FMT)
    else:
        start_phrase = report.start_label
    end_phrase = (
        format_ts_for_display(report.end, DATE_FMT) if report.end is not None else report.end_label
    )

    lines = [
        f"Report for {report.project_name} covering period from {start_phrase} to {end_phrase}.",
        "",
    ]

    if not report.activities:
        lines.append("  There were no activities recorded.")
    else:
        lines.append(
            f"  There were {len(report.activities)} activities recorded "
            f"with a total time of {minutes_to_str(report.total_minutes)}."
        )
        for activity in report.activities:
            lines.append(
                f"    {activity.name} for {minutes_to_str(activity.minutes)} "
                f"on {format_ts_for_display(activity.start, DATE_FMT)}."
            )

    if report.counts:
        lines.append("")
        lines.append(f"  The total lines of code in the repositories is {report.total_lines}.")
        for path, latest in report.latest_counts().items():
            if latest is None:
                lines.append(f"    {path} has no count of lines of code.")
            else:
                lines.append(f"    {path} has {latest.count} lines of code.")

    return "\n".join(lines)
