from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from ..core.enums import DayStatus, ReportKind
from ..core.results import Failure


# ----- queries: a closed set of report variants -----


@dataclass(frozen=True)
class DailyQuery:
    """One local day; None means today in the user's zone."""

    day: Union[date, str, None] = None
    kind: ReportKind = field(default=ReportKind.DAILY, init=False)


@dataclass(frozen=True)
class WeeklyQuery:
    """ISO week (Monday-Sunday) containing now in the user's zone."""

    kind: ReportKind = field(default=ReportKind.WEEKLY, init=False)


@dataclass(frozen=True)
class MonthlyQuery:
    """Calendar month as YYYY-MM (or any date inside it); None means current month."""

    month: Union[date, str, None] = None
    kind: ReportKind = field(default=ReportKind.MONTHLY, init=False)


@dataclass(frozen=True)
class RangeQuery:
    """Inclusive local-date range."""

    start: Union[date, str]
    end: Union[date, str]
    kind: ReportKind = field(default=ReportKind.RANGE, init=False)


ReportQuery = Union[DailyQuery, WeeklyQuery, MonthlyQuery, RangeQuery]


# ----- read-models -----


@dataclass(frozen=True)
class DayLine:
    work_date: date
    hours: Decimal
    status: DayStatus


@dataclass(frozen=True)
class WeekLine:
    week_start: date
    week_end: date
    hours: Decimal
    days: int


@dataclass(frozen=True)
class DailySummary:
    work_date: date
    status: DayStatus
    total_hours: Decimal
    first_check_in: Optional[datetime] = None
    last_check_out: Optional[datetime] = None
    break_minutes: int = 0
    live_hours: Optional[Decimal] = None


@dataclass(frozen=True)
class PeriodSummary:
    start: date
    end: date
    total_days: int
    total_hours: Decimal
    working_days: int
    completed_days: int
    average_hours: Optional[Decimal]
    efficiency_percent: Optional[Decimal] = None
    days: list[DayLine] = field(default_factory=list)
    weeks: list[WeekLine] = field(default_factory=list)
    best_day: Optional[DayLine] = None
    shortest_day: Optional[DayLine] = None


@dataclass(frozen=True)
class Report:
    kind: ReportKind
    title: str
    text: str
    summary: Union[DailySummary, PeriodSummary]


@dataclass(frozen=True)
class ReportResult:
    success: bool
    report: Optional[Report] = None
    failure: Optional[Failure] = None

    @property
    def text(self) -> str:
        if self.report is not None:
            return self.report.text
        return f"❌ {self.failure.message}" if self.failure else ""
