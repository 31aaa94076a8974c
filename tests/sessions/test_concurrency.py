from __future__ import annotations

import threading
from datetime import date, datetime, timedelta, timezone

from src.worktime.worktime.core.enums import FailureKind
from src.worktime.worktime.sessions.service import TrackingService


def _race(fn, count: int):
    barrier = threading.Barrier(count)
    results = [None] * count

    def worker(i: int):
        barrier.wait()
        results[i] = fn(i)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)
    return results


def test_concurrent_check_ins_for_one_user_admit_exactly_one(slow_events, sessions, users, resolver):
    tracking = TrackingService(slow_events, sessions, users, resolver)
    base = datetime(2026, 2, 4, 9, 0, tzinfo=timezone.utc)

    results = _race(lambda i: tracking.check_in("1", base + timedelta(seconds=i)), 6)

    assert sum(1 for r in results if r.success) == 1
    assert all(r.failure.kind == FailureKind.ALREADY_CHECKED_IN for r in results if not r.success)
    assert len(slow_events.events) == 1
    assert sessions.get("1", date(2026, 2, 4)).first_check_in is not None


def test_concurrent_check_outs_close_only_once(slow_events, sessions, users, resolver):
    tracking = TrackingService(slow_events, sessions, users, resolver)
    tracking.check_in("1", datetime(2026, 2, 4, 9, 0, tzinfo=timezone.utc))
    base = datetime(2026, 2, 4, 17, 0, tzinfo=timezone.utc)

    results = _race(lambda i: tracking.check_out("1", base + timedelta(seconds=i)), 4)

    assert sum(1 for r in results if r.success) == 1
    assert all(r.failure.kind == FailureKind.ALREADY_CHECKED_OUT for r in results if not r.success)
    assert len(slow_events.events) == 2


def test_different_users_do_not_contend(slow_events, sessions, users, resolver):
    tracking = TrackingService(slow_events, sessions, users, resolver)
    ids = ["1", "2", "3", "4"]
    instant = datetime(2026, 2, 4, 12, 0, tzinfo=timezone.utc)

    results = _race(lambda i: tracking.check_in(ids[i], instant), len(ids))

    assert all(r.success for r in results)
    assert len(slow_events.events) == 4
