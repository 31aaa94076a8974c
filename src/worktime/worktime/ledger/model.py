from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EventKind


@dataclass(frozen=True)
class Event:
    """Thực thể miền (domain): một sự kiện chấm công trong sổ cái.

    Immutable once stored. ``occurred_at`` is timezone-aware UTC and is the only
    ordering key; back-dated entries may carry a larger ``event_id`` than events
    that happened after them.
    """

    event_id: int
    user_id: str
    kind: EventKind
    occurred_at: datetime
    note: Optional[str] = None
    message_ref: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_check_in(self) -> bool:
        return self.kind == EventKind.CHECK_IN

    @property
    def is_check_out(self) -> bool:
        return self.kind == EventKind.CHECK_OUT
