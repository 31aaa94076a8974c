from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import (
    iso_week_bounds,
    iter_dates,
    local_date,
    month_bounds,
    parse_iso_date,
    parse_month,
    to_utc,
    utc_now,
)
from ..common.formatting import elapsed_hours, round_hours
from ..core.constants import DAILY_BREAKDOWN_MAX_DAYS
from ..core.enums import DayStatus, FailureKind, ReportKind
from ..core.exceptions import NotFoundError, StorageError, ValidationError
from ..core.results import GENERIC_STORAGE_MESSAGE, USER_NOT_FOUND_MESSAGE, Failure
from ..ledger.queries import events_for_local_day
from ..ledger.repository import EventRepository
from ..sessions.calculator.base import SessionCalculator
from ..sessions.calculator.paired_calculator import PairedSessionCalculator
from ..sessions.model import SessionAggregate
from ..sessions.repository import SessionRepository
from ..users.service import TimezoneResolver
from . import formatter
from .model import (
    DailyQuery,
    DailySummary,
    DayLine,
    MonthlyQuery,
    PeriodSummary,
    RangeQuery,
    Report,
    ReportQuery,
    ReportResult,
    WeekLine,
    WeeklyQuery,
)

_ZERO = Decimal("0.00")
_ONE_PLACE = Decimal("0.1")


def _day_status(agg: Optional[SessionAggregate]) -> DayStatus:
    if not agg or not agg.has_activity:
        return DayStatus.NO_ACTIVITY
    if agg.is_complete:
        return DayStatus.COMPLETED
    return DayStatus.IN_PROGRESS


def _average(total: Decimal, count: int) -> Optional[Decimal]:
    if count <= 0:
        return None
    return round_hours(total / Decimal(count))


class ReportService:
    """Report aggregator: rolls session aggregates up over a date range.

    Reads aggregates for stored totals and the ledger only for the live
    "currently working" figure, which is never persisted.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        events: EventRepository,
        timezones: TimezoneResolver,
        *,
        calculator: SessionCalculator | None = None,
        logger: logging.Logger | None = None,
    ):
        self._sessions = sessions
        self._events = events
        self._timezones = timezones
        self._calculator = calculator or PairedSessionCalculator()
        self.logger = logger or logging.getLogger(__name__)

    # ----- public API -----

    def generate(self, user_id: str, query: ReportQuery, *, now: datetime | None = None) -> ReportResult:
        handler = self._handler_for(query)
        user_id = str(user_id)
        try:
            now = to_utc(now or utc_now())
            tz = self._timezones.resolve_zone(user_id)
            return ReportResult(success=True, report=handler(user_id, query, tz, now))
        except NotFoundError:
            return ReportResult(success=False, failure=Failure(FailureKind.NOT_FOUND, USER_NOT_FOUND_MESSAGE))
        except ValidationError as e:
            return ReportResult(success=False, failure=Failure(FailureKind.VALIDATION, str(e)))
        except StorageError:
            self.logger.exception("%s report failed for user %s", query.kind.value, user_id)
            return ReportResult(success=False, failure=Failure(FailureKind.STORAGE, GENERIC_STORAGE_MESSAGE))

    def daily_report(self, user_id: str, day: date | str | None = None, *, now: datetime | None = None) -> ReportResult:
        return self.generate(user_id, DailyQuery(day), now=now)

    def weekly_report(self, user_id: str, *, now: datetime | None = None) -> ReportResult:
        return self.generate(user_id, WeeklyQuery(), now=now)

    def monthly_report(
        self, user_id: str, month: date | str | None = None, *, now: datetime | None = None
    ) -> ReportResult:
        return self.generate(user_id, MonthlyQuery(month), now=now)

    def range_report(
        self, user_id: str, start: date | str, end: date | str, *, now: datetime | None = None
    ) -> ReportResult:
        return self.generate(user_id, RangeQuery(start, end), now=now)

    # ----- dispatch -----

    def _handler_for(self, query: ReportQuery) -> Callable[[str, ReportQuery, ZoneInfo, datetime], Report]:
        handlers = {
            ReportKind.DAILY: (DailyQuery, self._daily),
            ReportKind.WEEKLY: (WeeklyQuery, self._weekly),
            ReportKind.MONTHLY: (MonthlyQuery, self._monthly),
            ReportKind.RANGE: (RangeQuery, self._range),
        }
        entry = handlers.get(getattr(query, "kind", None))
        if entry is None or not isinstance(query, entry[0]):
            raise TypeError(f"Unsupported report query: {query!r}")
        return entry[1]

    # ----- variants -----

    def _daily(self, user_id: str, query: DailyQuery, tz: ZoneInfo, now: datetime) -> Report:
        today = local_date(now, tz)
        day = _coerce_date(query.day) if query.day is not None else today
        return self._daily_for(user_id, day, tz, now)

    def _daily_for(self, user_id: str, day: date, tz: ZoneInfo, now: datetime) -> Report:
        agg = self._sessions.get(user_id, day)

        if not agg or not agg.has_activity:
            summary = DailySummary(work_date=day, status=DayStatus.NO_ACTIVITY, total_hours=_ZERO)
        elif agg.is_complete:
            summary = DailySummary(
                work_date=day,
                status=DayStatus.COMPLETED,
                total_hours=round_hours(agg.total_hours),
                first_check_in=agg.first_check_in,
                last_check_out=agg.last_check_out,
                break_minutes=agg.break_minutes,
            )
        else:
            status = DayStatus.INCOMPLETE
            live_hours = None
            open_in = self._calculator.tally(events_for_local_day(self._events, user_id, day, tz)).open_check_in
            if open_in is not None:
                status = DayStatus.IN_PROGRESS
                live_hours = elapsed_hours(open_in, now)
            summary = DailySummary(
                work_date=day,
                status=status,
                total_hours=round_hours(agg.total_hours),
                first_check_in=agg.first_check_in,
                last_check_out=agg.last_check_out,
                break_minutes=agg.break_minutes,
                live_hours=live_hours,
            )

        return Report(
            kind=ReportKind.DAILY,
            title=formatter.daily_title(summary),
            text=formatter.render_daily(summary, tz),
            summary=summary,
        )

    def _weekly(self, user_id: str, query: WeeklyQuery, tz: ZoneInfo, now: datetime) -> Report:
        start, end = iso_week_bounds(local_date(now, tz))
        by_date = {a.work_date: a for a in self._sessions.query_range(user_id, start, end)}

        days = [_day_line(d, by_date.get(d)) for d in iter_dates(start, end)]
        active = [d for d in days if d.status != DayStatus.NO_ACTIVITY]
        total = round_hours(sum((d.hours for d in active), _ZERO))

        summary = PeriodSummary(
            start=start,
            end=end,
            total_days=len(days),
            total_hours=total,
            working_days=len(active),
            completed_days=sum(1 for d in active if d.status == DayStatus.COMPLETED),
            average_hours=_average(total, len(active)),
            days=days,
        )
        return Report(
            kind=ReportKind.WEEKLY,
            title=formatter.weekly_title(summary),
            text=formatter.render_weekly(summary),
            summary=summary,
        )

    def _monthly(self, user_id: str, query: MonthlyQuery, tz: ZoneInfo, now: datetime) -> Report:
        if query.month is None:
            today = local_date(now, tz)
            year, month = today.year, today.month
        elif isinstance(query.month, date):
            year, month = query.month.year, query.month.month
        else:
            year, month = parse_month(query.month)

        start, end = month_bounds(year, month)
        aggregates = self._sessions.query_range(user_id, start, end)
        active = [_day_line(a.work_date, a) for a in aggregates if a.has_activity]
        total = round_hours(sum((d.hours for d in active), _ZERO))

        summary = PeriodSummary(
            start=start,
            end=end,
            total_days=(end - start).days + 1,
            total_hours=total,
            working_days=len(active),
            completed_days=sum(1 for d in active if d.status == DayStatus.COMPLETED),
            average_hours=_average(total, len(active)),
            days=active,
            weeks=_group_by_iso_week(active),
            best_day=_best_day(active),
            shortest_day=_shortest_day(active),
        )
        return Report(
            kind=ReportKind.MONTHLY,
            title=formatter.monthly_title(summary),
            text=formatter.render_monthly(summary),
            summary=summary,
        )

    def _range(self, user_id: str, query: RangeQuery, tz: ZoneInfo, now: datetime) -> Report:
        start = _coerce_date(query.start)
        end = _coerce_date(query.end)
        if start > end:
            raise ValidationError("Start date must be before or equal to end date.")
        if start == end:
            return self._daily_for(user_id, start, tz, now)

        aggregates = self._sessions.query_range(user_id, start, end)
        active = [_day_line(a.work_date, a) for a in aggregates if a.has_activity]
        total = round_hours(sum((d.hours for d in active), _ZERO))
        total_days = (end - start).days + 1

        efficiency = None
        if active:
            ratio = Decimal(len(active)) * 100 / Decimal(total_days)
            efficiency = ratio.quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)

        days: list[DayLine] = []
        if total_days <= DAILY_BREAKDOWN_MAX_DAYS:
            by_date = {a.work_date: a for a in aggregates}
            days = [_day_line(d, by_date.get(d)) for d in iter_dates(start, end)]

        summary = PeriodSummary(
            start=start,
            end=end,
            total_days=total_days,
            total_hours=total,
            working_days=len(active),
            completed_days=sum(1 for d in active if d.status == DayStatus.COMPLETED),
            average_hours=_average(total, len(active)),
            efficiency_percent=efficiency,
            days=days,
        )
        return Report(
            kind=ReportKind.RANGE,
            title=formatter.range_title(summary),
            text=formatter.render_range(summary),
            summary=summary,
        )


def _coerce_date(value: date | str) -> date:
    if isinstance(value, datetime):
        raise ValidationError("Expected a calendar date, not a timestamp.")
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def _day_line(day: date, agg: Optional[SessionAggregate]) -> DayLine:
    status = _day_status(agg)
    hours = round_hours(agg.total_hours) if status != DayStatus.NO_ACTIVITY else _ZERO
    return DayLine(work_date=day, hours=hours, status=status)


def _group_by_iso_week(lines: Sequence[DayLine]) -> list[WeekLine]:
    weeks: dict[date, list[DayLine]] = {}
    for line in lines:
        monday, _ = iso_week_bounds(line.work_date)
        weeks.setdefault(monday, []).append(line)
    return [
        WeekLine(
            week_start=monday,
            week_end=monday + timedelta(days=6),
            hours=round_hours(sum((d.hours for d in group), _ZERO)),
            days=len(group),
        )
        for monday, group in weeks.items()
    ]


def _best_day(lines: Sequence[DayLine]) -> Optional[DayLine]:
    best = None
    for line in lines:
        if line.hours <= 0:
            continue
        if best is None or line.hours > best.hours:
            best = line
    return best


def _shortest_day(lines: Sequence[DayLine]) -> Optional[DayLine]:
    nonzero = [line for line in lines if line.hours > 0]
    if len(nonzero) < 2:
        return None
    shortest = nonzero[0]
    for line in nonzero[1:]:
        if line.hours < shortest.hours:
            shortest = line
    return shortest
