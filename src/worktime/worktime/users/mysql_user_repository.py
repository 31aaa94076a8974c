from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, username, first_name, last_name, timezone, is_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        username=row.get("username"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        timezone=row.get("timezone"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (str(user_id),))
            row = fetchone(cur)
            if not row:
                return None
            return _to_user(row)

    def upsert(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, username, first_name, last_name, timezone, is_active)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    username=VALUES(username),
                    first_name=VALUES(first_name),
                    last_name=VALUES(last_name)
                """,
                (
                    user.user_id,
                    user.username,
                    user.first_name,
                    user.last_name,
                    user.timezone,
                    1 if user.is_active else 0,
                ),
            )

    def set_timezone(self, user_id: str, timezone: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET timezone=%s WHERE user_id=%s", (timezone, str(user_id)))
            return cur.rowcount > 0

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, str(user_id)))
            return cur.rowcount > 0

    def list_active(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE is_active=1 ORDER BY user_id ASC")
            return [_to_user(r) for r in fetchall(cur)]
