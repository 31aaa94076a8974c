from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.worktime.worktime.common.datetime_utils import (
    day_bounds,
    iso_week_bounds,
    iter_dates,
    local_date,
    month_bounds,
    parse_iso_date,
    parse_month,
    to_utc,
)
from src.worktime.worktime.core.exceptions import ValidationError


def test_local_date_depends_on_zone():
    instant = datetime(2026, 1, 6, 0, 15, tzinfo=timezone.utc)

    assert local_date(instant, ZoneInfo("UTC")) == date(2026, 1, 6)
    assert local_date(instant, ZoneInfo("America/New_York")) == date(2026, 1, 5)
    assert local_date(instant, ZoneInfo("Asia/Tehran")) == date(2026, 1, 6)


def test_local_date_rejects_naive_datetime():
    with pytest.raises(ValueError):
        local_date(datetime(2026, 1, 6, 0, 15), ZoneInfo("UTC"))


def test_day_bounds_are_local_midnights():
    start, end = day_bounds(date(2026, 1, 5), ZoneInfo("Asia/Tehran"))

    assert start == datetime(2026, 1, 4, 20, 30, tzinfo=timezone.utc)
    assert end == datetime(2026, 1, 5, 20, 30, tzinfo=timezone.utc)


def test_day_bounds_handle_dst_transition():
    tz = ZoneInfo("America/New_York")

    spring_start, spring_end = day_bounds(date(2026, 3, 8), tz)
    fall_start, fall_end = day_bounds(date(2026, 11, 1), tz)

    assert spring_end - spring_start == timedelta(hours=23)
    assert fall_end - fall_start == timedelta(hours=25)


def test_iso_week_and_month_bounds():
    assert iso_week_bounds(date(2026, 2, 4)) == (date(2026, 2, 2), date(2026, 2, 8))
    assert iso_week_bounds(date(2026, 2, 8)) == (date(2026, 2, 2), date(2026, 2, 8))
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2026, 12) == (date(2026, 12, 1), date(2026, 12, 31))


def test_iter_dates_is_inclusive():
    assert list(iter_dates(date(2026, 2, 27), date(2026, 3, 2))) == [
        date(2026, 2, 27),
        date(2026, 2, 28),
        date(2026, 3, 1),
        date(2026, 3, 2),
    ]
    assert list(iter_dates(date(2026, 3, 2), date(2026, 3, 1))) == []


@pytest.mark.parametrize("raw", ["2026-02-30", "2026-2-01", "02/01/2026", "", "2026-02-011", "tomorrow"])
def test_parse_iso_date_rejects_malformed(raw):
    with pytest.raises(ValidationError):
        parse_iso_date(raw)


def test_parse_iso_date_and_month():
    assert parse_iso_date(" 2026-02-28 ") == date(2026, 2, 28)
    assert parse_month("2026-02") == (2026, 2)
    with pytest.raises(ValidationError):
        parse_month("2026-13")
    with pytest.raises(ValidationError):
        parse_month("2026-2")


def test_to_utc_converts_offsets():
    local = datetime(2026, 1, 5, 9, 0, tzinfo=ZoneInfo("Europe/Berlin"))
    assert to_utc(local) == datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)
