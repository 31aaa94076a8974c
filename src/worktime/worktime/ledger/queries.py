from __future__ import annotations

from datetime import date
from typing import Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_bounds
from .model import Event
from .repository import EventRepository


def events_for_local_day(events: EventRepository, user_id: str, work_date: date, tz: ZoneInfo) -> Sequence[Event]:
    """Events whose instant falls inside ``work_date`` as observed in ``tz``."""
    start_utc, end_utc = day_bounds(work_date, tz)
    return events.query(str(user_id), start_utc, end_utc)
