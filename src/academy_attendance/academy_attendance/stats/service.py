from __future__ import annotations

from datetime import date
from typing import Optional

from ..attendance.service import AttendanceLedger
from ..common.validators import require_status
from ..core.constants import DEFAULT_MONTHLY_GOAL_PERCENT, TREND_MAX_WEEKS
from ..core.exceptions import ValidationError
from .calculator import build_snapshot
from .model import StatsSnapshot


class StatsService:
    """Student stats, recomputed from the store on every call.

    Nothing is kept between calls, so a write from any process or screen is
    visible on the next read.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        *,
        goal_percent: int = DEFAULT_MONTHLY_GOAL_PERCENT,
        trend_max_weeks: int = TREND_MAX_WEEKS,
    ):
        self._ledger = ledger
        self._goal_percent = int(goal_percent)
        self._trend_max_weeks = int(trend_max_weeks)

    def student_snapshot(
        self,
        student_id: int,
        *,
        start: date,
        end: date,
        class_id: Optional[int] = None,
        status=None,
    ) -> StatsSnapshot:
        if start > end:
            raise ValidationError("start must not be after end")
        status = require_status(status) if status is not None else None

        # Whole range: a capped history would skew rates and streaks.
        rows = self._ledger.query(
            student_id=int(student_id),
            class_id=class_id,
            start=start,
            end=end,
            status=status,
            limit=None,
        )
        return build_snapshot(
            rows,
            start=start,
            end=end,
            goal_target=self._goal_percent,
            max_weeks=self._trend_max_weeks,
        )
