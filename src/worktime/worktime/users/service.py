from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.validators import require_non_empty, require_timezone
from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import NotFoundError
from .model import User
from .repository import UserRepository


class TimezoneResolver:
    """Use case: which IANA zone governs a user's day boundaries and formatting."""

    def __init__(
        self,
        users: UserRepository,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
        logger: logging.Logger | None = None,
    ):
        self._users = users
        self._default = require_timezone(default_timezone).key
        self.logger = logger or logging.getLogger(__name__)

    @property
    def default_timezone(self) -> str:
        return self._default

    def resolve(self, user_id: str) -> str:
        user = self._users.get_by_id(str(user_id))
        if not user:
            raise NotFoundError(f"Unknown user {user_id}")
        return self.timezone_for(user)

    def resolve_zone(self, user_id: str) -> ZoneInfo:
        return ZoneInfo(self.resolve(user_id))

    def timezone_for(self, user: User) -> str:
        if not user.timezone:
            return self._default
        try:
            ZoneInfo(user.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            self.logger.warning(
                "User %s has invalid timezone %r, falling back to %s", user.user_id, user.timezone, self._default
            )
            return self._default
        return user.timezone


class UserService:
    """Use case: user profile lifecycle (register, timezone, soft delete)."""

    def __init__(
        self,
        users: UserRepository,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
        logger: logging.Logger | None = None,
    ):
        self._users = users
        self._default_timezone = require_timezone(default_timezone).key
        self.logger = logger or logging.getLogger(__name__)

    def register(
        self,
        user_id: str,
        *,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Create the user on first interaction, otherwise refresh profile fields.

        An existing user keeps its timezone and active flag.
        """
        user_id = require_non_empty(str(user_id), "User id")
        existing = self._users.get_by_id(user_id)

        user = User(
            user_id=user_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
            timezone=existing.timezone if existing else self._default_timezone,
            is_active=existing.is_active if existing else True,
        )
        self._users.upsert(user)
        if not existing:
            self.logger.info("Registered user %s (timezone=%s)", user_id, user.timezone)
        return user

    def get(self, user_id: str) -> User:
        user = self._users.get_by_id(str(user_id))
        if not user:
            raise NotFoundError(f"Unknown user {user_id}")
        return user

    def update_timezone(self, user_id: str, timezone: str) -> User:
        zone = require_timezone(timezone)
        user = self.get(user_id)
        self._users.set_timezone(user.user_id, zone.key)
        self.logger.info("User %s timezone changed %s -> %s", user.user_id, user.timezone, zone.key)
        return replace(user, timezone=zone.key)

    def deactivate(self, user_id: str) -> User:
        user = self.get(user_id)
        self._users.set_active(user.user_id, is_active=False)
        self.logger.info("User %s deactivated", user.user_id)
        return replace(user, is_active=False)

    def list_active_users(self) -> Sequence[User]:
        return list(self._users.list_active())
