from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Giao diện repository cho User.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def upsert(self, user: User) -> None:
        """Insert a new profile or refresh the name fields of an existing one.

        Never touches ``timezone`` or ``is_active`` of an existing row.
        """
        raise NotImplementedError

    def set_timezone(self, user_id: str, timezone: str) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_active(self) -> Sequence[User]:
        raise NotImplementedError
