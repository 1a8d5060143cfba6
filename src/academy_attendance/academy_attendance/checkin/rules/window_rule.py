from __future__ import annotations

from datetime import date, timedelta

from ...classes.model import ScheduledClass
from ...core.exceptions import OutsideCheckInWindowError
from ..model import CheckInSettings, CheckInWindow
from .base import CheckInContext, CheckInRule


def check_in_window(scheduled: ScheduledClass, on_date: date, settings: CheckInSettings) -> CheckInWindow:
    """[start - early margin, end + late margin] for one scheduled slot."""
    return CheckInWindow(
        opens_at=scheduled.starts_at(on_date) - timedelta(minutes=settings.early_window_minutes),
        closes_at=scheduled.ends_at(on_date) + timedelta(minutes=settings.late_window_minutes),
    )


class TimeWindowRule(CheckInRule):
    def check(self, ctx: CheckInContext) -> None:
        if ctx.scheduled is None:
            raise OutsideCheckInWindowError(f"class {ctx.class_id} is not scheduled today")

        window = check_in_window(ctx.scheduled, ctx.now.date(), ctx.settings)
        if not window.contains(ctx.now):
            raise OutsideCheckInWindowError(
                f"class {ctx.class_id}: {ctx.now:%H:%M} outside {window.opens_at:%H:%M}-{window.closes_at:%H:%M}"
            )
