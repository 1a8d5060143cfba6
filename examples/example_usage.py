"""Example: using the service layer directly (no Flask).

Controllers are thin; the attendance rules live in the services.
"""

import importlib
from datetime import date, timedelta

from config import get_settings_module

from src.academy_attendance.academy_attendance.attendance.roster import summarize
from src.academy_attendance.academy_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    today = date.today()
    for scheduled in container.class_service.scheduled_on(today):
        roster = container.roster_resolver.resolve(scheduled.class_id, today)
        print(scheduled.session.name, summarize(roster))

    stats = container.stats_service.student_snapshot(1, start=today - timedelta(days=27), end=today)
    print("rate:", stats.attendance_rate, "streak:", stats.current_streak)


if __name__ == "__main__":
    main()
