from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceSource, AttendanceStatus
from ..students.model import Student


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one status for one student, one class, one date.

    (student_id, class_id, attendance_date) is unique; re-marking overwrites.
    """

    attendance_id: int
    student_id: int
    class_id: int
    attendance_date: date
    status: AttendanceStatus
    source: AttendanceSource
    created_at: datetime
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceHistoryRow:
    """Read-model for history, stats and CSV export (joined with class data)."""

    attendance_id: int
    student_id: int
    class_id: int
    class_name: str
    instructor_name: str
    attendance_date: date
    status: AttendanceStatus
    source: AttendanceSource
    created_at: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceQuery:
    student_id: Optional[int] = None
    class_id: Optional[int] = None
    start: Optional[date] = None
    end: Optional[date] = None
    status: Optional[AttendanceStatus] = None
    limit: Optional[int] = DEFAULT_HISTORY_LIMIT


@dataclass(frozen=True)
class RosterEntry:
    """One expected student for a class/date.

    status None means "unmarked", which is not the same as absent.
    """

    student: Student
    status: Optional[AttendanceStatus] = None
    record_id: Optional[int] = None
    notes: Optional[str] = None

    @property
    def is_unmarked(self) -> bool:
        return self.status is None


@dataclass(frozen=True)
class RosterSummary:
    total: int
    present: int
    absent: int
    late: int
    excused: int
    unmarked: int


@dataclass(frozen=True)
class RecentCheckIn:
    """Read-model for the kiosk "recent check-ins" feed."""

    attendance_id: int
    student_id: int
    student_name: str
    belt_level: Optional[str]
    class_id: int
    source: AttendanceSource
    created_at: datetime
