"""Close kiosk check-ins left open longer than the configured auto-checkout hours.

Meant to run from cron every few minutes.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.academy_attendance.academy_attendance.container import AppOptions, build_container
from src.academy_attendance.academy_attendance.main import configure_logging


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), options=AppOptions.from_settings(settings))
    closed = container.lifecycle_service.sweep_auto_checkout()
    logging.getLogger("auto_checkout").info("done, %d check-in(s) closed", closed)
    print(f"OK: auto-checkout closed {closed} check-in(s)")


if __name__ == "__main__":
    main()
