from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ClassBreakdown:
    class_id: int
    class_name: Optional[str]
    instructor_name: Optional[str]
    total_sessions: int
    present_count: int
    absent_count: int
    attendance_rate: int


@dataclass(frozen=True)
class WeeklyTrendPoint:
    week: str
    week_start: date
    week_end: date
    attendance_rate: int
    total_sessions: int


@dataclass(frozen=True)
class MonthlyGoal:
    target: int
    current: int
    percentage: float


@dataclass(frozen=True)
class StatsSnapshot:
    """Derived, never persisted. Recomputed from ledger records on demand."""

    total_sessions: int
    present_count: int
    absent_count: int
    late_count: int
    excused_count: int
    attendance_rate: int
    current_streak: int
    longest_streak: int
    monthly_goal: MonthlyGoal
    class_breakdown: list[ClassBreakdown] = field(default_factory=list)
    weekly_trend: list[WeeklyTrendPoint] = field(default_factory=list)
