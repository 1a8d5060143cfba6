from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from ..classes.repository import ClassRepository, ReservationRepository
from ..common.validators import clean_notes, require_status
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, RemoteWriteError
from ..students.repository import StudentRepository
from .model import RosterEntry, RosterSummary
from .repository import AttendanceRepository

if TYPE_CHECKING:
    from .service import AttendanceLedger

logger = logging.getLogger(__name__)


class RosterResolver:
    """Expected students for a class/date, left-joined with that date's records."""

    def __init__(
        self,
        classes: ClassRepository,
        reservations: ReservationRepository,
        students: StudentRepository,
        attendance: AttendanceRepository,
    ):
        self._classes = classes
        self._reservations = reservations
        self._students = students
        self._attendance = attendance

    def resolve(self, class_id: int, on_date: date) -> list[RosterEntry]:
        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError(f"Class {class_id} not found")

        reservations = self._reservations.list_reserved_for_class(int(class_id))
        student_ids: list[int] = []
        for r in reservations:
            if r.student_id not in student_ids:
                student_ids.append(r.student_id)

        students = {s.student_id: s for s in self._students.get_many(student_ids)}
        records = {
            rec.student_id: rec
            for rec in self._attendance.list_for_class_and_date(class_id=int(class_id), attendance_date=on_date)
        }

        entries: list[RosterEntry] = []
        for sid in student_ids:
            student = students.get(sid)
            if not student:
                # Reservation for a student that no longer resolves.
                continue
            rec = records.get(sid)
            entries.append(
                RosterEntry(
                    student=student,
                    status=rec.status if rec else None,
                    record_id=rec.attendance_id if rec else None,
                    notes=rec.notes if rec else None,
                )
            )
        return entries


def summarize(entries: Iterable[RosterEntry]) -> RosterSummary:
    entries = list(entries)

    def count(status: Optional[AttendanceStatus]) -> int:
        return sum(1 for e in entries if e.status == status)

    return RosterSummary(
        total=len(entries),
        present=count(AttendanceStatus.PRESENT),
        absent=count(AttendanceStatus.ABSENT),
        late=count(AttendanceStatus.LATE),
        excused=count(AttendanceStatus.EXCUSED),
        unmarked=count(None),
    )


def search(entries: Iterable[RosterEntry], query: Optional[str]) -> list[RosterEntry]:
    """Case-insensitive match on full name or email."""
    q = (query or "").strip().lower()
    if not q:
        return list(entries)
    return [
        e
        for e in entries
        if q in e.student.display_name.lower() or q in (e.student.email or "").lower()
    ]


class RosterView:
    """Instructor-side roster kept in memory while marking.

    `mark()` updates the local row first and writes through the ledger after.
    If the write fails the row is put back and the error re-raised, so the view
    only drifts from the store until the next refresh or retry.
    """

    def __init__(self, ledger: "AttendanceLedger", resolver: RosterResolver, *, class_id: int, on_date: date):
        self._ledger = ledger
        self._resolver = resolver
        self.class_id = int(class_id)
        self.on_date = on_date
        self._entries: list[RosterEntry] = []

    @property
    def entries(self) -> Sequence[RosterEntry]:
        return tuple(self._entries)

    def refresh(self) -> Sequence[RosterEntry]:
        self._entries = self._resolver.resolve(self.class_id, self.on_date)
        return self.entries

    def filtered(self, query: Optional[str] = None) -> list[RosterEntry]:
        return search(self._entries, query)

    def summary(self) -> RosterSummary:
        return summarize(self._entries)

    def mark(self, student_id: int, status, notes: Optional[str] = None) -> RosterEntry:
        status = require_status(status)
        idx = self._index_of(int(student_id))
        previous = self._entries[idx]
        self._entries[idx] = RosterEntry(
            student=previous.student,
            status=status,
            record_id=previous.record_id,
            notes=clean_notes(notes),
        )

        try:
            record = self._ledger.mark_single(int(student_id), self.class_id, self.on_date, status, notes)
        except RemoteWriteError:
            self._entries[idx] = previous
            logger.warning("mark for student %s rolled back in local view", student_id)
            raise

        confirmed = RosterEntry(
            student=previous.student,
            status=record.status,
            record_id=record.attendance_id,
            notes=record.notes,
        )
        self._entries[idx] = confirmed
        return confirmed

    def _index_of(self, student_id: int) -> int:
        for i, e in enumerate(self._entries):
            if e.student.student_id == student_id:
                return i
        raise NotFoundError(f"Student {student_id} is not on this roster")
