from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): User.

    ``user_id`` is the opaque identifier supplied by the messaging front-end.
    ``timezone`` is an IANA name; None means "use the configured default".
    """

    user_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    timezone: Optional[str] = None
    is_active: bool = True

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.username or f"User {self.user_id}"
