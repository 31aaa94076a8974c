from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def utc_now() -> datetime:
    """Current instant in UTC.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalize a timezone-aware datetime to UTC."""
    if value.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    return value.astimezone(timezone.utc)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    """Calendar date of ``instant`` as observed in ``tz``.

    Every component buckets events into days through this function, so
    reconciliation and reporting always agree on where a day starts.
    """
    return to_utc(instant).astimezone(tz).date()


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """UTC half-open range [start, end) covering the local day ``day``.

    Both ends come from local midnights, so DST days are 23 or 25 hours long.
    """
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def iso_week_bounds(day: date) -> tuple[date, date]:
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string into date."""
    raw = (value or "").strip()
    try:
        if len(raw) != 10:
            raise ValueError(raw)
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValidationError(f"Invalid date '{value}'. Please use YYYY-MM-DD format.") from exc


def parse_month(value: str) -> tuple[int, int]:
    """Parse a strict YYYY-MM string into (year, month)."""
    raw = (value or "").strip()
    try:
        if len(raw) != 7:
            raise ValueError(raw)
        parsed = datetime.strptime(raw, "%Y-%m")
    except ValueError as exc:
        raise ValidationError(f"Invalid month '{value}'. Please use YYYY-MM format.") from exc
    return parsed.year, parsed.month
