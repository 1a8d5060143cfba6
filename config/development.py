import os

from config.attendance import (  # noqa: F401
    DASHBOARD_REFRESH_SECONDS,
    KIOSK_RECENT_LIMIT,
    KIOSK_REFRESH_SECONDS,
    LOG_LEVEL,
    MONTHLY_GOAL_PERCENT,
    PIN_LOCKOUT_SECONDS,
    PIN_MAX_FAILED_ATTEMPTS,
    PIN_PAD_IDLE_SECONDS,
    RATELIMIT_STORAGE_URI,
)

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academy_attendance_db"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
