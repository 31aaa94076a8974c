from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import local_date, to_utc, utc_now
from ..common.formatting import elapsed_hours, fmt_hours, fmt_time
from ..core.enums import DayStatus, EventKind, FailureKind
from ..core.exceptions import NotFoundError, StorageError, ValidationError
from ..core.results import GENERIC_STORAGE_MESSAGE, USER_NOT_FOUND_MESSAGE, Failure
from ..ledger.queries import events_for_local_day
from ..ledger.repository import EventRepository
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import TimezoneResolver
from .calculator.base import SessionCalculator
from .calculator.paired_calculator import PairedSessionCalculator
from .locks import KeyedLock
from .model import DayStatusView, DayTally, SessionAggregate
from .repository import SessionRepository


@dataclass(frozen=True)
class TrackingResult:
    success: bool
    message: str
    formatted_time: Optional[str] = None
    local_date: Optional[date] = None
    total_hours: Optional[Decimal] = None
    event_id: Optional[int] = None
    failure: Optional[Failure] = None

    @classmethod
    def rejected(cls, failure: Failure) -> "TrackingResult":
        return cls(success=False, message=failure.message, failure=failure)


@dataclass(frozen=True)
class StatusResult:
    success: bool
    message: str
    view: Optional[DayStatusView] = None
    failure: Optional[Failure] = None


_STATUS_LABEL = {
    DayStatus.IN_PROGRESS: ("🟢", "Currently working"),
    DayStatus.COMPLETED: ("✅", "Completed"),
    DayStatus.INCOMPLETE: ("🟡", "Partially logged"),
}


def _status_text(view: DayStatusView, tz: ZoneInfo) -> str:
    header = f"📅 Today's Status ({view.work_date.isoformat()})"
    if view.status == DayStatus.NO_ACTIVITY:
        return "\n".join(
            [
                header,
                "",
                "📍 Status: Not checked in",
                "⏱️ Total hours: 0.00",
                "",
                "Use /checkin to start tracking your work time! 🚀",
            ]
        )

    icon, label = _STATUS_LABEL[view.status]
    lines = [header, "", f"{icon} Status: {label}"]
    if view.first_check_in:
        lines.append(f"📍 Check-in: {fmt_time(view.first_check_in, tz)}")
    if view.last_check_out:
        lines.append(f"📤 Check-out: {fmt_time(view.last_check_out, tz)}")
    lines.append(f"⏱️ Total hours: {fmt_hours(view.total_hours)}")
    if view.live_hours is not None:
        lines.extend(["", f"🕐 Currently working for: {view.live_hours:.1f} hours"])
    return "\n".join(lines)


class TrackingService:
    """Reconciliation engine: validates check-in/check-out and rebuilds the day's aggregate.

    Holds no per-user state; everything is derived from the ledger on each call.
    Validation, append and recomputation for one (user, local date) run under a
    key-scoped lock so two racing requests cannot both pass the count check.
    """

    def __init__(
        self,
        events: EventRepository,
        sessions: SessionRepository,
        users: UserRepository,
        timezones: TimezoneResolver,
        *,
        calculator: SessionCalculator | None = None,
        locks: KeyedLock | None = None,
        lock_timeout_seconds: float = 10.0,
        logger: logging.Logger | None = None,
    ):
        self._events = events
        self._sessions = sessions
        self._users = users
        self._timezones = timezones
        self._calculator = calculator or PairedSessionCalculator()
        self._locks = locks if locks is not None else KeyedLock()
        self._lock_timeout = float(lock_timeout_seconds)
        self.logger = logger or logging.getLogger(__name__)

    # ----- commands -----

    def check_in(
        self,
        user_id: str,
        instant: datetime | None = None,
        *,
        note: str | None = None,
        message_ref: str | None = None,
    ) -> TrackingResult:
        return self._guarded("check-in", user_id, EventKind.CHECK_IN, instant, note, message_ref)

    def check_out(
        self,
        user_id: str,
        instant: datetime | None = None,
        *,
        note: str | None = None,
        message_ref: str | None = None,
    ) -> TrackingResult:
        return self._guarded("check-out", user_id, EventKind.CHECK_OUT, instant, note, message_ref)

    def recompute_aggregate(self, user_id: str, work_date: date) -> SessionAggregate:
        """Rebuild and persist the aggregate for one local day. Safe to re-run.

        Raises NotFoundError for an unknown user and StorageError when storage
        fails or the per-day lock cannot be taken in time.
        """
        user_id = str(user_id)
        tz = self._timezones.resolve_zone(user_id)
        try:
            with self._locks.hold((user_id, work_date), timeout=self._lock_timeout):
                return self._recompute(user_id, work_date, tz)
        except TimeoutError as exc:
            raise StorageError(f"Timed out recomputing {work_date} for user {user_id}") from exc

    # ----- derived queries -----

    def day_tally(self, user_id: str, work_date: date, tz: ZoneInfo) -> DayTally:
        return self._calculator.tally(events_for_local_day(self._events, user_id, work_date, tz))

    def today_status(self, user_id: str, now: datetime | None = None) -> StatusResult:
        """Hôm nay của user: trạng thái, giờ vào/ra, tổng giờ và thời gian đang làm."""
        user_id = str(user_id)
        try:
            now = to_utc(now or utc_now())
            tz = self._timezones.resolve_zone(user_id)
            today = local_date(now, tz)
            tally = self.day_tally(user_id, today, tz)
        except NotFoundError:
            failure = Failure(FailureKind.NOT_FOUND, USER_NOT_FOUND_MESSAGE)
            return StatusResult(success=False, message=failure.message, failure=failure)
        except StorageError:
            self.logger.exception("status failed for user %s", user_id)
            failure = Failure(FailureKind.STORAGE, GENERIC_STORAGE_MESSAGE)
            return StatusResult(success=False, message=failure.message, failure=failure)

        if tally.check_ins == 0 and tally.check_outs == 0:
            view = DayStatusView(work_date=today, status=DayStatus.NO_ACTIVITY, total_hours=tally.total_hours)
        else:
            if tally.open_check_in is not None:
                status = DayStatus.IN_PROGRESS
            elif tally.is_complete:
                status = DayStatus.COMPLETED
            else:
                status = DayStatus.INCOMPLETE
            view = DayStatusView(
                work_date=today,
                status=status,
                total_hours=tally.total_hours,
                first_check_in=tally.first_check_in,
                last_check_out=tally.last_check_out,
                live_hours=elapsed_hours(tally.open_check_in, now) if tally.open_check_in else None,
            )
        return StatusResult(success=True, message=_status_text(view, tz), view=view)

    def open_check_in(self, user_id: str, now: datetime | None = None) -> Optional[datetime]:
        """The unmatched check-in of the user's current local day, if any.

        Lookup helper for callers that handle errors themselves: raises
        NotFoundError for an unknown user and StorageError on storage failure.
        """
        user_id = str(user_id)
        tz = self._timezones.resolve_zone(user_id)
        today = local_date(now or utc_now(), tz)
        return self.day_tally(user_id, today, tz).open_check_in

    def users_missing_checkout(self, now: datetime | None = None) -> list[User]:
        """Active users whose local today still has an open check-in.

        Meant for the reminder job; StorageError propagates so the job can
        log and retry on its own schedule.
        """
        now = now or utc_now()
        missing: list[User] = []
        for user in self._users.list_active():
            tz = ZoneInfo(self._timezones.timezone_for(user))
            tally = self.day_tally(user.user_id, local_date(now, tz), tz)
            if tally.open_check_in is not None:
                missing.append(user)
        return missing

    # ----- internals -----

    def _guarded(self, action, user_id, kind, instant, note, message_ref) -> TrackingResult:
        try:
            return self._record(str(user_id), kind, instant, note, message_ref)
        except NotFoundError:
            return TrackingResult.rejected(Failure(FailureKind.NOT_FOUND, USER_NOT_FOUND_MESSAGE))
        except ValidationError as e:
            return TrackingResult.rejected(Failure(FailureKind.VALIDATION, str(e)))
        except (StorageError, TimeoutError):
            self.logger.exception("%s failed for user %s", action, user_id)
            return TrackingResult.rejected(Failure(FailureKind.STORAGE, GENERIC_STORAGE_MESSAGE))

    def _record(self, user_id, kind, instant, note, message_ref) -> TrackingResult:
        try:
            instant = to_utc(instant or utc_now())
        except ValueError as exc:
            raise ValidationError("Time must include a timezone") from exc

        tz = self._timezones.resolve_zone(user_id)
        work_date = local_date(instant, tz)

        with self._locks.hold((user_id, work_date), timeout=self._lock_timeout):
            tally = self.day_tally(user_id, work_date, tz)
            failure = self._check_rules(kind, tally, tz)
            if failure:
                self.logger.debug("Rejected %s for user %s on %s: %s", kind.value, user_id, work_date, failure.kind.value)
                return TrackingResult.rejected(failure)

            event_id = self._events.append(
                user_id=user_id,
                kind=kind,
                occurred_at=instant,
                note=note,
                message_ref=message_ref,
            )
            aggregate = self._recompute(user_id, work_date, tz)

        self.logger.info("Recorded %s for user %s at %s (%s)", kind.value, user_id, instant.isoformat(), work_date)

        if kind == EventKind.CHECK_IN:
            return TrackingResult(
                success=True,
                message="Checked in successfully!",
                formatted_time=fmt_time(instant, tz),
                local_date=work_date,
                event_id=event_id,
            )
        return TrackingResult(
            success=True,
            message=f"Checked out successfully! Total today: {fmt_hours(aggregate.total_hours)}h",
            formatted_time=fmt_time(instant, tz),
            local_date=work_date,
            total_hours=aggregate.total_hours,
            event_id=event_id,
        )

    def _check_rules(self, kind: EventKind, tally: DayTally, tz: ZoneInfo) -> Optional[Failure]:
        if kind == EventKind.CHECK_IN:
            if tally.check_ins > tally.check_outs:
                return Failure(
                    FailureKind.ALREADY_CHECKED_IN,
                    f"You're already checked in today at {fmt_time(tally.last_check_in, tz)}. "
                    "Please check out first.",
                    conflicting_at=tally.last_check_in,
                )
            return None

        if tally.check_ins == 0:
            return Failure(FailureKind.NO_OPEN_CHECK_IN, "You need to check in first before checking out.")
        if tally.check_outs >= tally.check_ins:
            return Failure(
                FailureKind.ALREADY_CHECKED_OUT,
                "You are already checked out. Check in again to start a new session.",
                conflicting_at=tally.last_check_out,
            )
        return None

    def _recompute(self, user_id: str, work_date: date, tz: ZoneInfo) -> SessionAggregate:
        tally = self.day_tally(user_id, work_date, tz)
        existing = self._sessions.get(user_id, work_date)

        aggregate = SessionAggregate(
            user_id=user_id,
            work_date=work_date,
            first_check_in=tally.first_check_in,
            last_check_out=tally.last_check_out,
            total_hours=tally.total_hours,
            is_complete=tally.is_complete,
            break_minutes=0,
            notes=existing.notes if existing else None,
        )
        self._sessions.upsert(aggregate)
        return aggregate
