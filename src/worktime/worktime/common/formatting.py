from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

_TWO_PLACES = Decimal("0.01")
_ONE_PLACE = Decimal("0.1")


def round_hours(value) -> Decimal:
    """Round an hour figure half-up to 2 decimal places."""
    return Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def minutes_to_hours(minutes: int) -> Decimal:
    return round_hours(Decimal(int(minutes)) / Decimal(60))


def fmt_hours(value) -> str:
    return f"{round_hours(value):.2f}"


def fmt_one_decimal(value) -> str:
    return f"{Decimal(str(value)).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP):.1f}"


def fmt_time(instant: datetime, tz: ZoneInfo) -> str:
    """Local wall-clock time as HH:MM."""
    return instant.astimezone(tz).strftime("%H:%M")


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def short_label(day: date) -> str:
    """e.g. 'Mar 3rd'."""
    return f"{day.strftime('%b')} {_ordinal(day.day)}"


def long_label(day: date) -> str:
    """e.g. 'March 3rd, 2025'."""
    return f"{day.strftime('%B')} {_ordinal(day.day)}, {day.year}"


def weekday_label(day: date) -> str:
    """e.g. 'Mon, Mar 3rd'."""
    return f"{day.strftime('%a')}, {short_label(day)}"


def elapsed_hours(since: datetime, now: datetime) -> Decimal:
    """Hours between two instants, 1 decimal place, never negative."""
    seconds = max((now - since).total_seconds(), 0)
    return (Decimal(str(seconds)) / Decimal(3600)).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)
