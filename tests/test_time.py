"""Tests for canonical timestamp helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from devtrack.utils.time import (
    AmbiguousLocalTimeError,
    NonexistentLocalTimeError,
    format_ts_for_display,
    format_ts_utc_z,
    local_naive_to_utc,
    parse_cli_datetime,
    parse_ts_utc,
    utc_now,
)


@pytest.mark.unit
class TestCanonicalInstants:
    def test_format_converts_to_utc(self) -> None:
        dt = datetime(2024, 6, 1, 14, 30, tzinfo=ZoneInfo("Europe/London"))
        assert format_ts_utc_z(dt) == "2024-06-01T13:30:00Z"

    def test_format_rejects_naive(self) -> None:
        with pytest.raises(ValueError, match="naive"):
            format_ts_utc_z(datetime(2024, 6, 1))

    def test_parse_accepts_z_and_offsets(self) -> None:
        expected = datetime(2024, 6, 1, 13, 30, tzinfo=UTC)
        assert parse_ts_utc("2024-06-01T13:30:00Z") == expected
        assert parse_ts_utc("2024-06-01T15:30:00+02:00") == expected

    def test_parse_rejects_naive_and_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_ts_utc("2024-06-01T13:30:00")
        with pytest.raises(ValueError):
            parse_ts_utc("yesterday")

    def test_utc_now_has_whole_seconds(self) -> None:
        now = utc_now()
        assert now.tzinfo is not None
        assert now.microsecond == 0


@pytest.mark.unit
class TestLocalTimes:
    def test_dst_gap_rejected(self) -> None:
        with pytest.raises(NonexistentLocalTimeError):
            local_naive_to_utc(datetime(2024, 3, 31, 1, 30), tz=ZoneInfo("Europe/London"))

    def test_dst_overlap_rejected(self) -> None:
        with pytest.raises(AmbiguousLocalTimeError):
            local_naive_to_utc(datetime(2024, 10, 27, 1, 30), tz=ZoneInfo("Europe/London"))

    def test_cli_forms(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEVTRACK_TZ", "America/New_York")
        assert parse_cli_datetime("2024-01-15T09:00") == datetime(2024, 1, 15, 14, 0, tzinfo=UTC)
        assert parse_cli_datetime("2024-01-15") == datetime(2024, 1, 15, 17, 0, tzinfo=UTC)
        assert parse_cli_datetime("2024-01-15T09:00:00Z") == datetime(
            2024, 1, 15, 9, 0, tzinfo=UTC
        )
        with pytest.raises(ValueError, match="Invalid date/datetime"):
            parse_cli_datetime("15/01/2024")

    def test_display_uses_configured_zone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEVTRACK_TZ", "Asia/Tokyo")
        dt = datetime(2024, 1, 15, 0, 30, tzinfo=UTC)
        assert format_ts_for_display(dt, "%Y-%m-%d %H:%M") == "2024-01-15 09:30"

    def test_invalid_zone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEVTRACK_TZ", "Mars/Olympus")
        with pytest.raises(ValueError, match="Invalid IANA timezone"):
            format_ts_for_display(datetime(2024, 1, 1, tzinfo=UTC))
