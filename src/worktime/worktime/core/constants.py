"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Tehran"
DEFAULT_STORAGE_TIMEOUT_SECONDS = 5
DAILY_BREAKDOWN_MAX_DAYS = 14
