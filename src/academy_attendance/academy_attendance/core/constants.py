"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

PIN_LENGTH = 4

DEFAULT_EARLY_WINDOW_MINUTES = 15
DEFAULT_LATE_WINDOW_MINUTES = 15
DEFAULT_AUTO_CHECKOUT_HOURS = 3
DEFAULT_MAX_DISTANCE_METERS = 100
DEFAULT_WELCOME_MESSAGE = "Welcome! Please enter your 4-digit PIN to check in."

DEFAULT_MONTHLY_GOAL_PERCENT = 80
DEFAULT_HISTORY_LIMIT = 500
TREND_MAX_WEEKS = 8

KIOSK_REFRESH_SECONDS = 10
DASHBOARD_REFRESH_SECONDS = 30
KIOSK_RECENT_LIMIT = 10
PIN_PAD_IDLE_SECONDS = 30

PIN_MAX_FAILED_ATTEMPTS = 5
PIN_LOCKOUT_SECONDS = 300

BULK_NOTE_TEMPLATE = "Bulk marked as {status}"
AUTO_ABSENT_NOTE = "Auto-marked absent"

CSV_HEADER = ("Date", "Class", "Instructor", "Status", "Notes")
CSV_FILENAME_TEMPLATE = "my-attendance-{day}.csv"
