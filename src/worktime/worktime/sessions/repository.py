from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import SessionAggregate


class SessionRepository(Protocol):
    """At most one aggregate per (user_id, work_date)."""

    def get(self, user_id: str, work_date: date) -> Optional[SessionAggregate]:
        raise NotImplementedError

    def upsert(self, aggregate: SessionAggregate) -> None:
        """Insert or replace the row keyed by (user_id, work_date)."""
        raise NotImplementedError

    def query_range(self, user_id: str, start: date, end: date) -> Sequence[SessionAggregate]:
        """Aggregates with ``start <= work_date <= end``, ascending by date."""
        raise NotImplementedError
