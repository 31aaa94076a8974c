from __future__ import annotations

from contextlib import contextmanager, suppress
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import StorageError


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, rollback on failure.

    Driver errors (including timeouts) are re-raised as StorageError so the
    services only ever see the domain taxonomy.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StorageError(f"Could not connect to database: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        _safe_rollback(conn)
        raise StorageError(f"Database operation failed: {exc}") from exc
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    with suppress(mysql.connector.Error):
        conn.rollback()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Re-attach UTC to naive DATETIME values read back from MySQL."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Strip tzinfo after converting to UTC; columns hold naive UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    return value.astimezone(timezone.utc).replace(tzinfo=None)
