from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import DayStatus


@dataclass(frozen=True)
class SessionAggregate:
    """Thực thể miền (domain): tổng hợp phiên làm việc theo (user, ngày địa phương).

    Derived from the ledger and recomputed in full on every check-in/check-out.
    ``first_check_in`` and ``last_check_out`` are display fields and ignore pairing.
    """

    user_id: str
    work_date: date
    first_check_in: Optional[datetime]
    last_check_out: Optional[datetime]
    total_hours: Decimal
    is_complete: bool
    break_minutes: int = 0
    notes: Optional[str] = None

    @property
    def has_activity(self) -> bool:
        return self.first_check_in is not None or self.last_check_out is not None


@dataclass(frozen=True)
class DayTally:
    """Result of walking one local day's events."""

    total_minutes: int
    total_hours: Decimal
    first_check_in: Optional[datetime]
    last_check_out: Optional[datetime]
    open_check_in: Optional[datetime]
    last_check_in: Optional[datetime]
    is_complete: bool
    check_ins: int
    check_outs: int


@dataclass(frozen=True)
class DayStatusView:
    """Snapshot of the user's current local day, derived from the ledger."""

    work_date: date
    status: DayStatus
    total_hours: Decimal
    first_check_in: Optional[datetime] = None
    last_check_out: Optional[datetime] = None
    live_hours: Optional[Decimal] = None
