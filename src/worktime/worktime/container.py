from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DatabaseConnection, db_config_from_dict
from .ledger.mysql_event_repository import MySQLEventRepository
from .reports.service import ReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.service import TrackingService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import TimezoneResolver, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    events_repo: MySQLEventRepository
    sessions_repo: MySQLSessionRepository

    timezone_resolver: TimezoneResolver
    user_service: UserService
    tracking_service: TrackingService
    report_service: ReportService


def build_container(*, db_config: dict, default_timezone: str = DEFAULT_TIMEZONE) -> Container:
    conn = DatabaseConnection.get_instance(db_config_from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    events_repo = MySQLEventRepository(conn)
    sessions_repo = MySQLSessionRepository(conn)

    timezone_resolver = TimezoneResolver(users_repo, default_timezone=default_timezone)
    user_service = UserService(users_repo, default_timezone=default_timezone)
    tracking_service = TrackingService(events_repo, sessions_repo, users_repo, timezone_resolver)
    report_service = ReportService(sessions_repo, events_repo, timezone_resolver)

    return Container(
        conn=conn,
        users_repo=users_repo,
        events_repo=events_repo,
        sessions_repo=sessions_repo,
        timezone_resolver=timezone_resolver,
        user_service=user_service,
        tracking_service=tracking_service,
        report_service=report_service,
    )
