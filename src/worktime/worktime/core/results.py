from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import FailureKind


@dataclass(frozen=True)
class Failure:
    """Structured negative outcome surfaced verbatim to the user."""

    kind: FailureKind
    message: str
    conflicting_at: Optional[datetime] = None


GENERIC_STORAGE_MESSAGE = "Something went wrong while saving or loading your data. Please try again."
USER_NOT_FOUND_MESSAGE = "User not found. Please register again with /start."
