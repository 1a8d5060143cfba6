"""Attendance and kiosk tuning shared by every environment."""

import os

# Kiosk polling must stay faster than the dashboard.
KIOSK_REFRESH_SECONDS = int(os.getenv("KIOSK_REFRESH_SECONDS", "10"))
DASHBOARD_REFRESH_SECONDS = int(os.getenv("DASHBOARD_REFRESH_SECONDS", "30"))
KIOSK_RECENT_LIMIT = int(os.getenv("KIOSK_RECENT_LIMIT", "10"))

PIN_MAX_FAILED_ATTEMPTS = int(os.getenv("PIN_MAX_FAILED_ATTEMPTS", "5"))
PIN_LOCKOUT_SECONDS = int(os.getenv("PIN_LOCKOUT_SECONDS", "300"))
PIN_PAD_IDLE_SECONDS = int(os.getenv("PIN_PAD_IDLE_SECONDS", "30"))

# Failed-PIN counters; every worker must share one store.
RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

MONTHLY_GOAL_PERCENT = int(os.getenv("MONTHLY_GOAL_PERCENT", "80"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
