"""Constants and defaults.

Note: Keep constants here to avoid magic strings spread across code.
"""

DEFAULT_REPORT_TIMEZONE = "Asia/Tokyo"

COMPOSITE_KEY_SEPARATOR = "#"

# Year-month as typed by users (Slack text / query string): YYYYMM
YEAR_MONTH_LENGTH = 6

# Format accepted when a user corrects a log entry.
EDIT_DATETIME_FORMAT = "%Y-%m-%d %H:%M"

REPORT_SEPARATOR = "-------------------------------------"
