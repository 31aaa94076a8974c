from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EventKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, to_db_utc
from .model import Event
from .repository import EventRepository


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(
        self,
        *,
        user_id: str,
        kind: EventKind,
        occurred_at: datetime,
        note: Optional[str] = None,
        message_ref: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(user_id, kind, occurred_at, note, message_ref)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (str(user_id), kind.value, to_db_utc(occurred_at), note, message_ref),
            )
            return int(cur.lastrowid)

    def query(self, user_id: str, start_utc: datetime, end_utc: datetime) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, user_id, kind, occurred_at, note, message_ref, created_at
                FROM time_entries
                WHERE user_id=%s AND occurred_at >= %s AND occurred_at < %s
                ORDER BY occurred_at ASC, entry_id ASC
                """,
                (str(user_id), to_db_utc(start_utc), to_db_utc(end_utc)),
            )
            rows = fetchall(cur)
            return [
                Event(
                    event_id=int(r["entry_id"]),
                    user_id=str(r["user_id"]),
                    kind=EventKind(r["kind"]),
                    occurred_at=as_utc(r["occurred_at"]),
                    note=r.get("note"),
                    message_ref=r.get("message_ref"),
                    created_at=as_utc(r.get("created_at")),
                )
                for r in rows
            ]
