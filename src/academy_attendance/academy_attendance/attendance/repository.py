from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceSource, AttendanceStatus
from .model import AttendanceHistoryRow, AttendanceQuery, AttendanceRecord, RecentCheckIn


class AttendanceRepository(Protocol):
    def get_for_key(self, *, student_id: int, class_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_class_and_date(self, *, class_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        student_id: int,
        class_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        notes: Optional[str],
        source: AttendanceSource,
        now: datetime,
    ) -> AttendanceRecord:
        """Insert, or update status/notes/source in place on the natural key."""

        raise NotImplementedError

    def insert_missing(
        self,
        *,
        class_id: int,
        attendance_date: date,
        student_ids: Sequence[int],
        status: AttendanceStatus,
        notes: Optional[str],
        source: AttendanceSource,
        now: datetime,
    ) -> int:
        """Insert only for students with no record on the key; existing rows are never touched.

        Returns the number of rows inserted.
        """

        raise NotImplementedError

    def replace_for_students(
        self,
        *,
        class_id: int,
        attendance_date: date,
        student_ids: Sequence[int],
        status: AttendanceStatus,
        notes: Optional[str],
        source: AttendanceSource,
        now: datetime,
    ) -> int:
        """Atomically replace records for (class_id, attendance_date) restricted to `student_ids`.

        Either every student ends with exactly one record in `status` or nothing changes.
        Returns the number of records written.
        """

        raise NotImplementedError

    def query(self, query: AttendanceQuery) -> Sequence[AttendanceHistoryRow]:
        """Records matching every given filter, newest date first."""

        raise NotImplementedError

    def list_recent_checkins(self, *, on_date: date, limit: int) -> Sequence[RecentCheckIn]:
        """`present` records for `on_date`, newest created first."""

        raise NotImplementedError
