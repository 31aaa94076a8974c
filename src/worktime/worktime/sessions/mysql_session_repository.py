from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, fetchone, to_db_utc
from .model import SessionAggregate
from .repository import SessionRepository

_COLUMNS = "user_id, work_date, check_in_at, check_out_at, total_hours, break_minutes, is_complete, notes"


def _to_aggregate(row: dict) -> SessionAggregate:
    return SessionAggregate(
        user_id=str(row["user_id"]),
        work_date=row["work_date"],
        first_check_in=as_utc(row.get("check_in_at")),
        last_check_out=as_utc(row.get("check_out_at")),
        total_hours=Decimal(str(row.get("total_hours") or 0)),
        is_complete=bool(row.get("is_complete")),
        break_minutes=int(row.get("break_minutes") or 0),
        notes=row.get("notes"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: str, work_date: date) -> Optional[SessionAggregate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM work_sessions WHERE user_id=%s AND work_date=%s",
                (str(user_id), work_date),
            )
            row = fetchone(cur)
            if not row:
                return None
            return _to_aggregate(row)

    def upsert(self, aggregate: SessionAggregate) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_sessions(
                    user_id, work_date, check_in_at, check_out_at,
                    total_hours, break_minutes, is_complete, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_at=VALUES(check_in_at),
                    check_out_at=VALUES(check_out_at),
                    total_hours=VALUES(total_hours),
                    break_minutes=VALUES(break_minutes),
                    is_complete=VALUES(is_complete),
                    notes=VALUES(notes)
                """,
                (
                    aggregate.user_id,
                    aggregate.work_date,
                    to_db_utc(aggregate.first_check_in),
                    to_db_utc(aggregate.last_check_out),
                    aggregate.total_hours,
                    int(aggregate.break_minutes),
                    1 if aggregate.is_complete else 0,
                    aggregate.notes,
                ),
            )

    def query_range(self, user_id: str, start: date, end: date) -> Sequence[SessionAggregate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_sessions
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (str(user_id), start, end),
            )
            return [_to_aggregate(r) for r in fetchall(cur)]
