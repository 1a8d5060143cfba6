"""Pure attendance statistics.

All functions take records exposing `attendance_date`, `status` and
`class_id` (and optionally `class_name`, `instructor_name`, `created_at`).
Only `present` counts as attended; `late` and `excused` do not.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_MONTHLY_GOAL_PERCENT, TREND_MAX_WEEKS
from ..core.enums import AttendanceStatus
from .model import ClassBreakdown, MonthlyGoal, StatsSnapshot, WeeklyTrendPoint


def percent(part: int, total: int) -> int:
    """Whole percent rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)


def newest_first(records: Iterable) -> list:
    return sorted(
        records,
        key=lambda r: (r.attendance_date, getattr(r, "created_at", None) or datetime.min),
        reverse=True,
    )


def _present(record) -> bool:
    return record.status == AttendanceStatus.PRESENT


def attendance_rate(records: Sequence) -> int:
    return percent(sum(1 for r in records if _present(r)), len(records))


def current_streak(records: Sequence) -> int:
    """Consecutive `present` records counting back from the newest one."""
    streak = 0
    for r in newest_first(records):
        if not _present(r):
            break
        streak += 1
    return streak


def longest_streak(records: Sequence) -> int:
    best = 0
    run = 0
    for r in newest_first(records):
        if _present(r):
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def class_breakdown(records: Sequence) -> list[ClassBreakdown]:
    groups: dict[int, dict] = {}
    for r in records:
        g = groups.get(r.class_id)
        if g is None:
            g = {
                "class_name": getattr(r, "class_name", None),
                "instructor_name": getattr(r, "instructor_name", None),
                "total": 0,
                "present": 0,
                "absent": 0,
            }
            groups[r.class_id] = g
        g["total"] += 1
        if r.status == AttendanceStatus.PRESENT:
            g["present"] += 1
        elif r.status == AttendanceStatus.ABSENT:
            g["absent"] += 1

    return [
        ClassBreakdown(
            class_id=class_id,
            class_name=g["class_name"],
            instructor_name=g["instructor_name"],
            total_sessions=g["total"],
            present_count=g["present"],
            absent_count=g["absent"],
            attendance_rate=percent(g["present"], g["total"]),
        )
        for class_id, g in groups.items()
    ]


def weekly_trend(records: Sequence, start: date, end: date, *, max_weeks: Optional[int] = None) -> list[WeeklyTrendPoint]:
    """Consecutive 7-day buckets from `start`; the last one is clipped at `end`."""
    if end < start:
        return []

    days = (end - start).days + 1
    weeks = -(-days // 7)
    if max_weeks is not None:
        weeks = min(weeks, int(max_weeks))

    points: list[WeeklyTrendPoint] = []
    for i in range(weeks):
        week_start = start + timedelta(days=7 * i)
        week_end = min(week_start + timedelta(days=6), end)
        bucket = [r for r in records if week_start <= r.attendance_date <= week_end]
        points.append(
            WeeklyTrendPoint(
                week=week_start.strftime("%b %d"),
                week_start=week_start,
                week_end=week_end,
                attendance_rate=attendance_rate(bucket),
                total_sessions=len(bucket),
            )
        )
    return points


def monthly_goal(rate: int, *, target: int = DEFAULT_MONTHLY_GOAL_PERCENT) -> MonthlyGoal:
    percentage = min(rate / target * 100, 100.0) if target > 0 else 100.0
    return MonthlyGoal(target=int(target), current=int(rate), percentage=percentage)


def build_snapshot(
    records: Sequence,
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
    goal_target: int = DEFAULT_MONTHLY_GOAL_PERCENT,
    max_weeks: Optional[int] = TREND_MAX_WEEKS,
) -> StatsSnapshot:
    records = newest_first(records)

    def count(status: AttendanceStatus) -> int:
        return sum(1 for r in records if r.status == status)

    rate = attendance_rate(records)
    trend = weekly_trend(records, start, end, max_weeks=max_weeks) if start and end else []

    return StatsSnapshot(
        total_sessions=len(records),
        present_count=count(AttendanceStatus.PRESENT),
        absent_count=count(AttendanceStatus.ABSENT),
        late_count=count(AttendanceStatus.LATE),
        excused_count=count(AttendanceStatus.EXCUSED),
        attendance_rate=rate,
        current_streak=current_streak(records),
        longest_streak=longest_streak(records),
        monthly_goal=monthly_goal(rate, target=goal_target),
        class_breakdown=class_breakdown(records),
        weekly_trend=trend,
    )
