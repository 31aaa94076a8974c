from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from src.worktime.worktime.core.enums import DayStatus, EventKind, FailureKind
from src.worktime.worktime.core.exceptions import NotFoundError, StorageError
from src.worktime.worktime.sessions.locks import KeyedLock
from src.worktime.worktime.sessions.model import SessionAggregate
from src.worktime.worktime.sessions.service import TrackingService
from src.worktime.worktime.users.model import User


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_check_in_returns_local_time_and_date(tracking, sessions, events):
    # Asia/Tehran is UTC+03:30.
    result = tracking.check_in("3", utc(2026, 2, 4, 5, 30), note="office", message_ref="m-1")

    assert result.success is True
    assert result.failure is None
    assert result.formatted_time == "09:00"
    assert result.local_date == date(2026, 2, 4)
    assert events.events[0].note == "office"
    assert events.events[0].message_ref == "m-1"

    agg = sessions.get("3", date(2026, 2, 4))
    assert agg.first_check_in == utc(2026, 2, 4, 5, 30)
    assert agg.total_hours == Decimal("0.00")
    assert agg.is_complete is False


def test_second_check_in_is_rejected_with_prior_time(tracking, events):
    tracking.check_in("1", utc(2026, 2, 4, 9, 0))
    result = tracking.check_in("1", utc(2026, 2, 4, 9, 5))

    assert result.success is False
    assert result.failure.kind == FailureKind.ALREADY_CHECKED_IN
    assert result.failure.conflicting_at == utc(2026, 2, 4, 9, 0)
    assert "09:00" in result.message
    assert len(events.events) == 1


def test_check_out_without_check_in_is_rejected(tracking, events, sessions):
    result = tracking.check_out("1", utc(2026, 2, 4, 17, 0))

    assert result.failure.kind == FailureKind.NO_OPEN_CHECK_IN
    assert events.events == []
    assert sessions.rows == {}


def test_second_check_out_is_rejected(tracking, events):
    tracking.check_in("1", utc(2026, 2, 4, 9, 0))
    tracking.check_out("1", utc(2026, 2, 4, 17, 0))
    result = tracking.check_out("1", utc(2026, 2, 4, 17, 5))

    assert result.failure.kind == FailureKind.ALREADY_CHECKED_OUT
    assert result.failure.conflicting_at == utc(2026, 2, 4, 17, 0)
    assert len(events.events) == 2


def test_full_day_totals_eight_and_a_half_hours(tracking, sessions):
    tracking.check_in("1", utc(2026, 2, 4, 9, 0))
    result = tracking.check_out("1", utc(2026, 2, 4, 17, 30))

    assert result.success is True
    assert result.formatted_time == "17:30"
    assert result.total_hours == Decimal("8.50")
    assert "8.50" in result.message

    agg = sessions.get("1", date(2026, 2, 4))
    assert agg.total_hours == Decimal("8.50")
    assert agg.is_complete is True
    assert agg.break_minutes == 0


def test_multiple_sessions_in_one_day(tracking, sessions):
    tracking.check_in("1", utc(2026, 2, 4, 9, 0))
    tracking.check_out("1", utc(2026, 2, 4, 12, 0))
    again = tracking.check_in("1", utc(2026, 2, 4, 13, 0))
    tracking.check_out("1", utc(2026, 2, 4, 15, 0))

    assert again.success is True
    agg = sessions.get("1", date(2026, 2, 4))
    assert agg.total_hours == Decimal("5.00")
    assert agg.first_check_in == utc(2026, 2, 4, 9, 0)
    assert agg.last_check_out == utc(2026, 2, 4, 15, 0)


def test_recompute_is_idempotent(tracking, sessions):
    tracking.check_in("1", utc(2026, 2, 4, 9, 0))
    tracking.check_out("1", utc(2026, 2, 4, 11, 10))
    tracking.check_in("1", utc(2026, 2, 4, 12, 0))

    first = tracking.recompute_aggregate("1", date(2026, 2, 4))
    second = tracking.recompute_aggregate("1", date(2026, 2, 4))

    assert first == second
    assert sessions.get("1", date(2026, 2, 4)) == second
    assert second.total_hours == Decimal("2.17")
    assert len(sessions.rows) == 1


def test_recompute_preserves_notes(tracking, sessions):
    sessions.upsert(
        SessionAggregate(
            user_id="1",
            work_date=date(2026, 2, 4),
            first_check_in=None,
            last_check_out=None,
            total_hours=Decimal("0.00"),
            is_complete=False,
            notes="worked remotely",
        )
    )
    tracking.check_in("1", utc(2026, 2, 4, 9, 0))

    assert sessions.get("1", date(2026, 2, 4)).notes == "worked remotely"


def test_shift_across_utc_midnight_stays_one_local_day(tracking, sessions):
    # New York: 18:55 -> 19:15 on Jan 5 even though UTC rolls over.
    tracking.check_in("2", utc(2026, 1, 5, 23, 55))
    result = tracking.check_out("2", utc(2026, 1, 6, 0, 15))

    assert result.success is True
    assert result.local_date == date(2026, 1, 5)
    assert result.total_hours == Decimal("0.33")
    assert sessions.get("2", date(2026, 1, 6)) is None


def test_shift_across_local_midnight_is_two_days(tracking, sessions, events):
    tracking.check_in("1", utc(2026, 1, 5, 23, 55))
    rejected = tracking.check_out("1", utc(2026, 1, 6, 0, 15))

    assert rejected.failure.kind == FailureKind.NO_OPEN_CHECK_IN

    # A corrected ledger entry written directly still lands in its own local day.
    events.add("1", EventKind.CHECK_OUT, utc(2026, 1, 6, 0, 15))
    day_one = tracking.recompute_aggregate("1", date(2026, 1, 5))
    day_two = tracking.recompute_aggregate("1", date(2026, 1, 6))

    assert day_one.total_hours == Decimal("0.00")
    assert day_one.is_complete is False
    assert day_one.first_check_in == utc(2026, 1, 5, 23, 55)
    assert day_two.total_hours == Decimal("0.00")
    assert day_two.first_check_in is None
    assert day_two.last_check_out == utc(2026, 1, 6, 0, 15)
    assert len(sessions.rows) == 2


def test_default_timezone_applies_when_unset(tracking):
    # User 4 has no zone; resolver default is Europe/Berlin (UTC+1 in winter).
    result = tracking.check_in("4", utc(2026, 2, 4, 23, 30))

    assert result.local_date == date(2026, 2, 5)
    assert result.formatted_time == "00:30"


def test_unknown_user_is_not_found(tracking):
    result = tracking.check_in("999", utc(2026, 2, 4, 9, 0))

    assert result.failure.kind == FailureKind.NOT_FOUND


def test_naive_instant_is_a_validation_failure(tracking, events):
    result = tracking.check_in("1", datetime(2026, 2, 4, 9, 0))

    assert result.failure.kind == FailureKind.VALIDATION
    assert events.events == []


def test_storage_failure_is_reported_not_raised(broken_tracking, caplog):
    with caplog.at_level(logging.ERROR):
        result = broken_tracking.check_in("1", utc(2026, 2, 4, 9, 0))

    assert result.success is False
    assert result.failure.kind == FailureKind.STORAGE
    assert "connection reset" not in result.message
    assert any("check-in failed" in r.getMessage() for r in caplog.records)


def test_open_check_in_is_derived_from_ledger(tracking, fixed_now):
    assert tracking.open_check_in("1", now=fixed_now) is None

    tracking.check_in("1", utc(2026, 2, 4, 9, 0))
    assert tracking.open_check_in("1", now=fixed_now) == utc(2026, 2, 4, 9, 0)

    tracking.check_out("1", utc(2026, 2, 4, 11, 0))
    assert tracking.open_check_in("1", now=fixed_now) is None


def test_users_missing_checkout(tracking, users, fixed_now):
    tracking.check_in("1", utc(2026, 2, 4, 9, 0))
    tracking.check_in("2", utc(2026, 2, 4, 14, 0))
    tracking.check_out("2", utc(2026, 2, 4, 16, 0))
    tracking.check_in("3", utc(2026, 2, 4, 6, 0))
    users.set_active("3", is_active=False)

    missing = tracking.users_missing_checkout(now=fixed_now)

    assert [u.user_id for u in missing] == ["1"]


def test_today_status_not_checked_in(tracking, fixed_now):
    result = tracking.today_status("1", now=fixed_now)

    assert result.success is True
    assert result.view.status == DayStatus.NO_ACTIVITY
    assert "Status: Not checked in" in result.message
    assert "Today's Status (2026-02-04)" in result.message


def test_today_status_while_working(tracking):
    tracking.check_in("1", utc(2026, 2, 4, 8, 0))
    tracking.check_out("1", utc(2026, 2, 4, 9, 0))
    tracking.check_in("1", utc(2026, 2, 4, 10, 0))

    result = tracking.today_status("1", now=utc(2026, 2, 4, 11, 15))

    assert result.view.status == DayStatus.IN_PROGRESS
    assert result.view.total_hours == Decimal("1.00")
    assert result.view.live_hours == Decimal("1.3")
    assert "🟢 Status: Currently working" in result.message
    assert "Currently working for: 1.3 hours" in result.message


def test_today_status_completed_and_partial(tracking, events, users):
    tracking.check_in("1", utc(2026, 2, 4, 8, 0))
    tracking.check_out("1", utc(2026, 2, 4, 12, 0))

    done = tracking.today_status("1", now=utc(2026, 2, 4, 13, 0))
    assert done.view.status == DayStatus.COMPLETED
    assert done.view.live_hours is None
    assert "📤 Check-out: 12:00" in done.message

    events.add("5", EventKind.CHECK_OUT, utc(2026, 2, 4, 9, 0))
    users.upsert(User(user_id="5", timezone="UTC"))
    partial = tracking.today_status("5", now=utc(2026, 2, 4, 13, 0))
    assert partial.view.status == DayStatus.INCOMPLETE
    assert "Partially logged" in partial.message


def test_today_status_failures(tracking, broken_tracking, fixed_now):
    assert tracking.today_status("999", now=fixed_now).failure.kind == FailureKind.NOT_FOUND
    assert broken_tracking.today_status("1", now=fixed_now).failure.kind == FailureKind.STORAGE


def _service_with(locks, events, sessions, users, resolver):
    return TrackingService(events, sessions, users, resolver, locks=locks, lock_timeout_seconds=0.05)


def test_injected_lock_registry_is_used(events, sessions, users, resolver):
    locks = KeyedLock()
    first = _service_with(locks, events, sessions, users, resolver)
    second = _service_with(locks, events, sessions, users, resolver)

    assert first._locks is locks
    assert second._locks is locks


def test_check_in_times_out_as_storage_failure_while_day_is_locked(events, sessions, users, resolver):
    locks = KeyedLock()
    service = _service_with(locks, events, sessions, users, resolver)

    with locks.hold(("1", date(2026, 2, 4))):
        result = service.check_in("1", utc(2026, 2, 4, 9, 0))

    assert result.success is False
    assert result.failure.kind == FailureKind.STORAGE
    assert events.events == []

    # Another day of the same user is not blocked.
    assert service.check_in("1", utc(2026, 2, 5, 9, 0)).success is True


def test_recompute_times_out_as_storage_error(events, sessions, users, resolver):
    locks = KeyedLock()
    service = _service_with(locks, events, sessions, users, resolver)

    with locks.hold(("1", date(2026, 2, 4))):
        with pytest.raises(StorageError):
            service.recompute_aggregate("1", date(2026, 2, 4))

    assert len(locks) == 0


def test_lookup_helpers_raise_instead_of_returning_failures(tracking, broken_tracking, fixed_now):
    with pytest.raises(NotFoundError):
        tracking.open_check_in("999", now=fixed_now)
    with pytest.raises(StorageError):
        broken_tracking.open_check_in("1", now=fixed_now)
    with pytest.raises(StorageError):
        broken_tracking.users_missing_checkout(now=fixed_now)
