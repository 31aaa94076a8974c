from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector

from ..core.constants import DEFAULT_STORAGE_TIMEOUT_SECONDS


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = DEFAULT_STORAGE_TIMEOUT_SECONDS
    statement_timeout_ms: int = DEFAULT_STORAGE_TIMEOUT_SECONDS * 1000


def db_config_from_dict(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "worktime_db")),
        connection_timeout=int(db_config.get("connection_timeout", DEFAULT_STORAGE_TIMEOUT_SECONDS)),
        statement_timeout_ms=int(
            db_config.get("statement_timeout_ms", DEFAULT_STORAGE_TIMEOUT_SECONDS * 1000)
        ),
    )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation. Every connection is
    bounded by ``connection_timeout`` and a per-session statement time limit so
    no ledger or aggregate call can block indefinitely.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        conn = mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connection_timeout),
            time_zone="+00:00",
        )
        if self._config.statement_timeout_ms > 0:
            cur = conn.cursor()
            try:
                cur.execute("SET SESSION max_execution_time=%s", (int(self._config.statement_timeout_ms),))
            finally:
                cur.close()
        return conn
