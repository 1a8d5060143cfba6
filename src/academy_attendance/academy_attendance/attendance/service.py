from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import clean_notes, require_positive_id, require_status
from ..core.constants import AUTO_ABSENT_NOTE, DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceSource, AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import AttendanceHistoryRow, AttendanceQuery, AttendanceRecord, RecentCheckIn
from .repository import AttendanceRepository
from .roster import RosterResolver

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Authoritative read/write surface for attendance records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        roster: RosterResolver,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._roster = roster
        self._clock = clock

    def mark_single(
        self,
        student_id: int,
        class_id: int,
        on_date: date,
        status,
        notes: Optional[str] = None,
        *,
        source: AttendanceSource = AttendanceSource.MANUAL,
    ) -> AttendanceRecord:
        status = require_status(status)
        student_id = require_positive_id(student_id, "student_id")
        class_id = require_positive_id(class_id, "class_id")

        if not self._students.get_by_id(student_id):
            raise NotFoundError(f"Student {student_id} not found")
        if not self._classes.get_by_id(class_id):
            raise NotFoundError(f"Class {class_id} not found")

        record = self._attendance.upsert(
            student_id=student_id,
            class_id=class_id,
            attendance_date=on_date,
            status=status,
            notes=clean_notes(notes),
            source=AttendanceSource(source),
            now=self._clock(),
        )
        return record

    def mark_unmarked_as_absent(self, class_id: int, on_date: date) -> list[int]:
        """Mark every roster student without a record as absent.

        Already-marked students are never touched, however often this runs.
        Returns the ids that were unmarked when the roster was read.
        """

        entries = self._roster.resolve(int(class_id), on_date)
        unmarked = [e.student.student_id for e in entries if e.is_unmarked]
        if not unmarked:
            return []

        inserted = self._attendance.insert_missing(
            class_id=int(class_id),
            attendance_date=on_date,
            student_ids=unmarked,
            status=AttendanceStatus.ABSENT,
            notes=AUTO_ABSENT_NOTE,
            source=AttendanceSource.MANUAL,
            now=self._clock(),
        )
        logger.info(
            "class %s on %s: %d unmarked student(s), %d marked absent",
            class_id,
            on_date.isoformat(),
            len(unmarked),
            inserted,
        )
        return unmarked

    def query(
        self,
        *,
        student_id: Optional[int] = None,
        class_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status=None,
        limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceHistoryRow]:
        """History rows, newest first. `limit=None` reads the whole range."""
        if start and end and start > end:
            raise ValidationError("start must not be after end")
        if limit is not None and int(limit) <= 0:
            raise ValidationError("limit must be positive")

        return self._attendance.query(
            AttendanceQuery(
                student_id=int(student_id) if student_id is not None else None,
                class_id=int(class_id) if class_id is not None else None,
                start=start,
                end=end,
                status=require_status(status) if status is not None else None,
                limit=int(limit) if limit is not None else None,
            )
        )

    def get_record(self, student_id: int, class_id: int, on_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_key(student_id=int(student_id), class_id=int(class_id), attendance_date=on_date)

    def recent_checkins(self, on_date: date, *, limit: int) -> Sequence[RecentCheckIn]:
        return self._attendance.list_recent_checkins(on_date=on_date, limit=int(limit))
