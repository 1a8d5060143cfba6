import os

from config.attendance import (  # noqa: F401
    DASHBOARD_REFRESH_SECONDS,
    KIOSK_RECENT_LIMIT,
    KIOSK_REFRESH_SECONDS,
    MONTHLY_GOAL_PERCENT,
    PIN_LOCKOUT_SECONDS,
    PIN_MAX_FAILED_ATTEMPTS,
    PIN_PAD_IDLE_SECONDS,
    RATELIMIT_STORAGE_URI,
)

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academy_attendance_test"),
}

DEBUG = False
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
