from __future__ import annotations

from enum import Enum


class EventKind(str, Enum):
    """Loại sự kiện chấm công lưu trong sổ cái."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class DayStatus(str, Enum):
    """Trạng thái của một ngày làm việc khi hiển thị báo cáo."""

    COMPLETED = "COMPLETED"
    IN_PROGRESS = "IN_PROGRESS"
    INCOMPLETE = "INCOMPLETE"
    NO_ACTIVITY = "NO_ACTIVITY"


class ReportKind(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    RANGE = "range"


class FailureKind(str, Enum):
    """Các loại kết quả thất bại trả về cho tầng gọi (không phải exception)."""

    VALIDATION = "VALIDATION"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    ALREADY_CHECKED_OUT = "ALREADY_CHECKED_OUT"
    NO_OPEN_CHECK_IN = "NO_OPEN_CHECK_IN"
    NOT_FOUND = "NOT_FOUND"
    STORAGE = "STORAGE"
