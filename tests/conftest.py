from __future__ import annotations

import threading
import time
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from src.worktime.worktime.core.enums import EventKind
from src.worktime.worktime.core.exceptions import StorageError
from src.worktime.worktime.ledger.model import Event
from src.worktime.worktime.reports.service import ReportService
from src.worktime.worktime.sessions.model import SessionAggregate
from src.worktime.worktime.sessions.service import TrackingService
from src.worktime.worktime.users.model import User
from src.worktime.worktime.users.service import TimezoneResolver, UserService


class InMemoryUsers:
    def __init__(self, *users: User):
        self.users_by_id: dict[str, User] = {u.user_id: u for u in users}

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users_by_id.get(str(user_id))

    def upsert(self, user: User) -> None:
        existing = self.users_by_id.get(user.user_id)
        if existing:
            user = replace(user, timezone=existing.timezone, is_active=existing.is_active)
        self.users_by_id[user.user_id] = user

    def set_timezone(self, user_id: str, timezone: str) -> bool:
        user = self.users_by_id.get(str(user_id))
        if not user:
            return False
        self.users_by_id[user.user_id] = replace(user, timezone=timezone)
        return True

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        user = self.users_by_id.get(str(user_id))
        if not user:
            return False
        self.users_by_id[user.user_id] = replace(user, is_active=is_active)
        return True

    def list_active(self):
        return [u for u in self.users_by_id.values() if u.is_active]


class InMemoryEvents:
    def __init__(self, *, query_delay: float = 0.0):
        self.events: list[Event] = []
        self._id = 0
        self._guard = threading.Lock()
        self.query_delay = query_delay
        self.query_calls = 0

    def append(self, *, user_id, kind, occurred_at, note=None, message_ref=None) -> int:
        with self._guard:
            self._id += 1
            self.events.append(
                Event(
                    event_id=self._id,
                    user_id=str(user_id),
                    kind=kind,
                    occurred_at=occurred_at.astimezone(timezone.utc),
                    note=note,
                    message_ref=message_ref,
                )
            )
            return self._id

    def query(self, user_id, start_utc, end_utc):
        self.query_calls += 1
        with self._guard:
            items = [e for e in self.events if e.user_id == str(user_id) and start_utc <= e.occurred_at < end_utc]
        if self.query_delay:
            time.sleep(self.query_delay)
        return sorted(items, key=lambda e: (e.occurred_at, e.event_id))

    def add(self, user_id: str, kind: EventKind, occurred_at: datetime) -> int:
        """Write straight into the ledger, bypassing validation."""
        return self.append(user_id=user_id, kind=kind, occurred_at=occurred_at)


class InMemorySessions:
    def __init__(self):
        self.rows: dict[tuple[str, date], SessionAggregate] = {}
        self.upserts = 0

    def get(self, user_id, work_date):
        return self.rows.get((str(user_id), work_date))

    def upsert(self, aggregate: SessionAggregate) -> None:
        self.upserts += 1
        self.rows[(aggregate.user_id, aggregate.work_date)] = aggregate

    def query_range(self, user_id, start, end):
        items = [a for (uid, d), a in self.rows.items() if uid == str(user_id) and start <= d <= end]
        return sorted(items, key=lambda a: a.work_date)


class BrokenEvents(InMemoryEvents):
    def query(self, user_id, start_utc, end_utc):
        raise StorageError("connection reset")


class BrokenSessions(InMemorySessions):
    def get(self, user_id, work_date):
        raise StorageError("timeout")

    def query_range(self, user_id, start, end):
        raise StorageError("timeout")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 4, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        User(user_id="1", username="alice", timezone="UTC"),
        User(user_id="2", username="bob", timezone="America/New_York"),
        User(user_id="3", username="carol", timezone="Asia/Tehran"),
        User(user_id="4", username="dave", timezone=None),
    )


@pytest.fixture
def events() -> InMemoryEvents:
    return InMemoryEvents()


@pytest.fixture
def sessions() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def resolver(users) -> TimezoneResolver:
    return TimezoneResolver(users, default_timezone="Europe/Berlin")


@pytest.fixture
def tracking(events, sessions, users, resolver) -> TrackingService:
    return TrackingService(events, sessions, users, resolver)


@pytest.fixture
def reports(events, sessions, resolver) -> ReportService:
    return ReportService(sessions, events, resolver)


@pytest.fixture
def user_service(users) -> UserService:
    return UserService(users, default_timezone="Asia/Tehran")


@pytest.fixture
def broken_tracking(users, resolver) -> TrackingService:
    return TrackingService(BrokenEvents(), InMemorySessions(), users, resolver)


@pytest.fixture
def broken_reports(events, resolver) -> ReportService:
    return ReportService(BrokenSessions(), events, resolver)


@pytest.fixture
def slow_events() -> InMemoryEvents:
    return InMemoryEvents(query_delay=0.05)
