from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EventKind
from .model import Event


class EventRepository(Protocol):
    """Append-only ledger: no update or delete."""

    def append(
        self,
        *,
        user_id: str,
        kind: EventKind,
        occurred_at: datetime,
        note: Optional[str] = None,
        message_ref: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def query(self, user_id: str, start_utc: datetime, end_utc: datetime) -> Sequence[Event]:
        """Events with ``start_utc <= occurred_at < end_utc``, ascending by instant."""
        raise NotImplementedError
