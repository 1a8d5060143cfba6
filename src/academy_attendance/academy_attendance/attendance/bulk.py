from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable, Optional

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id, require_status
from ..core.constants import BULK_NOTE_TEMPLATE
from ..core.enums import AttendanceSource
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class BulkMarkingService:
    """Apply one status to a set of students for a class/date, all or nothing.

    The store replaces by key-set in one transaction, so re-running after a
    failure converges to the same end state.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._clock = clock

    def mark(
        self,
        student_ids: Iterable[int],
        status,
        class_id: int,
        on_date: date,
        *,
        notes: Optional[str] = None,
    ) -> int:
        status = require_status(status)
        class_id = require_positive_id(class_id, "class_id")

        ids: list[int] = []
        for sid in student_ids:
            sid = require_positive_id(sid, "student_id")
            if sid not in ids:
                ids.append(sid)
        if not ids:
            raise ValidationError("No students selected")

        if not self._classes.get_by_id(class_id):
            raise NotFoundError(f"Class {class_id} not found")
        found = {s.student_id for s in self._students.get_many(ids)}
        missing = [sid for sid in ids if sid not in found]
        if missing:
            raise NotFoundError(f"Unknown student id(s): {', '.join(str(m) for m in missing)}")

        written = self._attendance.replace_for_students(
            class_id=class_id,
            attendance_date=on_date,
            student_ids=ids,
            status=status,
            notes=notes or BULK_NOTE_TEMPLATE.format(status=status.value),
            source=AttendanceSource.BULK,
            now=self._clock(),
        )
        logger.info("bulk marked %d student(s) as %s for class %s on %s", written, status.value, class_id, on_date)
        return written
