from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from zeiterfassung.timeconv import (
    format_utc_instant,
    local_to_utc,
    parse_utc_instant,
    utc_to_local_date,
    utc_to_local_time,
)


def test_parse_utc_instant_accepts_z_suffix_and_offsets() -> None:
    expected = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    assert parse_utc_instant("2024-01-01T08:00:00Z") == expected
    assert parse_utc_instant("2024-01-01T08:00:00.000Z") == expected
    assert parse_utc_instant("2024-01-01T09:00:00+01:00") == expected
    assert parse_utc_instant("2024-01-01T08:00:00") == expected


def test_parse_utc_instant_returns_none_for_garbage() -> None:
    assert parse_utc_instant(None) is None
    assert parse_utc_instant("") is None
    assert parse_utc_instant("yesterday-ish") is None


def test_utc_to_local_crosses_date_boundary() -> None:
    tz = ZoneInfo("Europe/Berlin")

    assert utc_to_local_date("2024-01-31T23:30:00Z", tz) == "2024-02-01"
    assert utc_to_local_time("2024-01-31T23:30:00Z", tz) == "00:30"
    assert utc_to_local_time("2024-07-01T06:05:00Z", tz) == "08:05"


def test_utc_to_local_malformed_input_yields_none() -> None:
    assert utc_to_local_date("not a date", timezone.utc) is None
    assert utc_to_local_time("not a date", timezone.utc) is None


def test_local_to_utc_applies_offset_and_dst() -> None:
    tz = ZoneInfo("Europe/Berlin")

    assert local_to_utc("2024-01-15", "09:00", tz) == "2024-01-15T08:00:00.000Z"
    assert local_to_utc("2024-07-15", "09:00", tz) == "2024-07-15T07:00:00.000Z"


def test_local_to_utc_rejects_malformed_input() -> None:
    with pytest.raises(ValueError, match="Invalid local date/time"):
        local_to_utc("2024-13-01", "09:00", timezone.utc)


def test_local_round_trip_at_minute_granularity() -> None:
    tz = ZoneInfo("America/New_York")
    instant = "2024-03-20T14:45:00.000Z"

    day = utc_to_local_date(instant, tz)
    clock = utc_to_local_time(instant, tz)

    assert local_to_utc(day, clock, tz) == instant


def test_format_utc_instant_keeps_milliseconds() -> None:
    value = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)

    assert format_utc_instant(value) == "2024-05-06T07:08:09.123Z"
