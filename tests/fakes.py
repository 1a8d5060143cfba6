"""In-memory repositories and test doubles shared by the test modules."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from src.academy_attendance.academy_attendance.attendance.model import (
    AttendanceHistoryRow,
    AttendanceQuery,
    AttendanceRecord,
    RecentCheckIn,
)
from src.academy_attendance.academy_attendance.checkin.model import (
    AcademyLocation,
    CheckInSession,
    CheckInSettings,
)
from src.academy_attendance.academy_attendance.classes.model import (
    ClassSchedule,
    ClassSession,
    Reservation,
    ScheduledClass,
)
from src.academy_attendance.academy_attendance.container import AppOptions, Container, assemble
from src.academy_attendance.academy_attendance.core.enums import (
    CheckInState,
    MembershipStatus,
    ReservationStatus,
)
from src.academy_attendance.academy_attendance.core.exceptions import RemoteWriteError
from src.academy_attendance.academy_attendance.students.model import Student

# Monday; class_schedules.day_of_week 1.
MONDAY = date(2026, 10, 19)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryStudents:
    def __init__(self, students: list[Student], pins: Optional[dict[int, str]] = None):
        self.by_id = {s.student_id: s for s in students}
        self.pins = dict(pins or {})

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.by_id.get(student_id)

    def get_many(self, student_ids):
        return [self.by_id[i] for i in student_ids if i in self.by_id]

    def find_active_by_pin(self, pin: str, *, limit: int = 2):
        found = [self.by_id[sid] for sid, p in sorted(self.pins.items()) if p == pin and self.by_id[sid].is_active]
        return found[:limit]

    def pin_in_use(self, pin: str, *, exclude_student_id: Optional[int] = None) -> bool:
        return any(
            p == pin and sid != exclude_student_id and self.by_id[sid].is_active for sid, p in self.pins.items()
        )

    def set_pin(self, *, student_id: int, pin: str) -> bool:
        self.pins[student_id] = pin
        return True


class InMemoryClasses:
    def __init__(self, sessions: list[ClassSession], schedules: list[ClassSchedule]):
        self.by_id = {c.class_id: c for c in sessions}
        self.schedules = list(schedules)

    def get_by_id(self, class_id: int) -> Optional[ClassSession]:
        return self.by_id.get(class_id)

    def list_scheduled_for_day(self, day_of_week: int):
        out = [
            ScheduledClass(session=self.by_id[s.class_id], schedule=s)
            for s in self.schedules
            if s.day_of_week == day_of_week and self.by_id[s.class_id].is_active
        ]
        return sorted(out, key=lambda sc: (sc.schedule.start_time, sc.class_id))


@dataclass
class InMemoryReservations:
    reservations: list[Reservation]

    def list_reserved_for_class(self, class_id: int):
        return [r for r in self.reservations if r.class_id == class_id and r.status == ReservationStatus.RESERVED]


class InMemoryAttendance:
    def __init__(self, classes: Optional[InMemoryClasses] = None, students: Optional[InMemoryStudents] = None):
        self.records: dict[tuple[int, int, date], AttendanceRecord] = {}
        self._classes = classes
        self._students = students
        self._id = 0
        self.fail_writes = False
        self.fail_after_delete = False

    def _check(self) -> None:
        if self.fail_writes:
            raise RemoteWriteError("store unavailable")

    def _next_id(self) -> int:
        self._id += 1
        return self._id

    def seed(self, record: AttendanceRecord) -> None:
        self.records[(record.student_id, record.class_id, record.attendance_date)] = record
        self._id = max(self._id, record.attendance_id)

    def get_for_key(self, *, student_id: int, class_id: int, attendance_date: date):
        return self.records.get((student_id, class_id, attendance_date))

    def list_for_class_and_date(self, *, class_id: int, attendance_date: date):
        return [r for (s, c, d), r in self.records.items() if c == class_id and d == attendance_date]

    def upsert(self, *, student_id, class_id, attendance_date, status, notes, source, now):
        self._check()
        key = (student_id, class_id, attendance_date)
        existing = self.records.get(key)
        if existing:
            rec = AttendanceRecord(
                attendance_id=existing.attendance_id,
                student_id=student_id,
                class_id=class_id,
                attendance_date=attendance_date,
                status=status,
                source=source,
                created_at=existing.created_at,
                notes=notes,
                updated_at=now,
            )
        else:
            rec = AttendanceRecord(
                attendance_id=self._next_id(),
                student_id=student_id,
                class_id=class_id,
                attendance_date=attendance_date,
                status=status,
                source=source,
                created_at=now,
                notes=notes,
            )
        self.records[key] = rec
        return rec

    def insert_missing(self, *, class_id, attendance_date, student_ids, status, notes, source, now) -> int:
        self._check()
        inserted = 0
        for sid in student_ids:
            key = (sid, class_id, attendance_date)
            if key in self.records:
                continue
            self.records[key] = AttendanceRecord(
                attendance_id=self._next_id(),
                student_id=sid,
                class_id=class_id,
                attendance_date=attendance_date,
                status=status,
                source=source,
                created_at=now,
                notes=notes,
            )
            inserted += 1
        return inserted

    def replace_for_students(self, *, class_id, attendance_date, student_ids, status, notes, source, now) -> int:
        self._check()
        snapshot = dict(self.records)
        try:
            for sid in student_ids:
                self.records.pop((sid, class_id, attendance_date), None)
            if self.fail_after_delete:
                raise RemoteWriteError("connection lost mid-transaction")
            for sid in student_ids:
                self.records[(sid, class_id, attendance_date)] = AttendanceRecord(
                    attendance_id=self._next_id(),
                    student_id=sid,
                    class_id=class_id,
                    attendance_date=attendance_date,
                    status=status,
                    source=source,
                    created_at=now,
                    notes=notes,
                )
        except RemoteWriteError:
            # Transaction rollback.
            self.records = snapshot
            raise
        return len(student_ids)

    def query(self, query: AttendanceQuery):
        rows = []
        for rec in self.records.values():
            if query.student_id is not None and rec.student_id != query.student_id:
                continue
            if query.class_id is not None and rec.class_id != query.class_id:
                continue
            if query.start is not None and rec.attendance_date < query.start:
                continue
            if query.end is not None and rec.attendance_date > query.end:
                continue
            if query.status is not None and rec.status != query.status:
                continue
            session = self._classes.get_by_id(rec.class_id) if self._classes else None
            rows.append(
                AttendanceHistoryRow(
                    attendance_id=rec.attendance_id,
                    student_id=rec.student_id,
                    class_id=rec.class_id,
                    class_name=session.name if session else "Unknown Class",
                    instructor_name=(session.instructor_name if session else None) or "Unknown Instructor",
                    attendance_date=rec.attendance_date,
                    status=rec.status,
                    source=rec.source,
                    created_at=rec.created_at,
                    notes=rec.notes,
                )
            )
        rows.sort(key=lambda r: (r.attendance_date, r.created_at), reverse=True)
        return rows if query.limit is None else rows[: query.limit]

    def list_recent_checkins(self, *, on_date: date, limit: int):
        rows = []
        for rec in self.records.values():
            if rec.attendance_date != on_date or rec.status.value != "present":
                continue
            student = self._students.get_by_id(rec.student_id) if self._students else None
            rows.append(
                RecentCheckIn(
                    attendance_id=rec.attendance_id,
                    student_id=rec.student_id,
                    student_name=student.display_name if student else "",
                    belt_level=student.belt_level if student else None,
                    class_id=rec.class_id,
                    source=rec.source,
                    created_at=rec.created_at,
                )
            )
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[:limit]


class InMemorySettings:
    def __init__(self, settings: Optional[CheckInSettings] = None):
        self.row = settings
        self.saved_at: list[datetime] = []

    def get(self) -> Optional[CheckInSettings]:
        return self.row

    def save(self, settings: CheckInSettings, *, now: datetime) -> CheckInSettings:
        self.row = settings.with_changes(settings_id=settings.settings_id or 1)
        self.saved_at.append(now)
        return self.row


@dataclass
class InMemoryLocations:
    locations: list[AcademyLocation] = field(default_factory=list)

    def list_active(self):
        return list(self.locations)


class InMemorySessions:
    def __init__(self):
        self.by_id: dict[int, CheckInSession] = {}
        self._id = 0
        self.fail_opens = False

    def open(self, *, student_id, class_id, check_in_time, coordinates=None, device_id=None) -> CheckInSession:
        if self.fail_opens:
            raise RemoteWriteError("store unavailable")
        self._id += 1
        session = CheckInSession(
            check_in_id=self._id,
            student_id=student_id,
            class_id=class_id,
            check_in_time=check_in_time,
            state=CheckInState.CHECKED_IN,
            device_id=device_id,
        )
        self.by_id[self._id] = session
        return session

    def get_open_for_student(self, student_id: int) -> Optional[CheckInSession]:
        open_ = [s for s in self.by_id.values() if s.student_id == student_id and s.is_open]
        return max(open_, key=lambda s: s.check_in_time) if open_ else None

    def close(self, *, check_in_id, check_out_time, state) -> bool:
        s = self.by_id.get(check_in_id)
        if not s or not s.is_open:
            return False
        self.by_id[check_in_id] = CheckInSession(
            check_in_id=s.check_in_id,
            student_id=s.student_id,
            class_id=s.class_id,
            check_in_time=s.check_in_time,
            state=state,
            check_out_time=check_out_time,
            device_id=s.device_id,
        )
        return True

    def close_open_before(self, *, cutoff, check_out_time, state) -> int:
        ids = [s.check_in_id for s in self.by_id.values() if s.is_open and s.check_in_time < cutoff]
        for i in ids:
            self.close(check_in_id=i, check_out_time=check_out_time, state=state)
        return len(ids)


class SnapshotTransaction:
    """Stands in for `db_transaction`: restores attendance and sessions if the block raises."""

    def __init__(self, attendance: InMemoryAttendance, sessions: InMemorySessions):
        self._attendance = attendance
        self._sessions = sessions
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def __call__(self):
        records = dict(self._attendance.records)
        sessions = dict(self._sessions.by_id)
        try:
            yield
        except Exception:
            self._attendance.records = records
            self._sessions.by_id = sessions
            self.rollbacks += 1
            raise
        self.commits += 1


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    def __init__(self):
        self.timers: list[FakeTimer] = []

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> FakeTimer:
        t = FakeTimer(delay_seconds, callback)
        self.timers.append(t)
        return t

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire_pending(self) -> None:
        for t in self.pending:
            t.cancelled = True
            t.callback()


def student(student_id: int, first: str, last: str, **kwargs) -> Student:
    return Student(
        student_id=student_id,
        first_name=first,
        last_name=last,
        email=kwargs.pop("email", f"{first.lower()}@example.com"),
        belt_level=kwargs.pop("belt_level", "White"),
        membership_status=kwargs.pop("membership_status", MembershipStatus.ACTIVE),
    )


def demo_repos(*, settings: Optional[CheckInSettings] = None, locations: Optional[list[AcademyLocation]] = None):
    """Two classes on Mondays, three students; Alex and Sarah reserved class 1."""

    students = InMemoryStudents(
        [
            student(1, "Alex", "Chen"),
            student(2, "Sarah", "Kim", belt_level="Yellow"),
            student(3, "Mike", "Johnson", belt_level="Blue"),
        ],
        pins={1: "1234", 2: "2345", 3: "3456"},
    )
    classes = InMemoryClasses(
        [
            ClassSession(class_id=1, name="Beginner Karate", capacity=20, instructor_id=1, instructor_name="Sensei Johnson"),
            ClassSession(class_id=2, name="Advanced Martial Arts", capacity=12, instructor_id=2, instructor_name="Sensei Martinez"),
        ],
        [
            ClassSchedule(schedule_id=1, class_id=1, day_of_week=1, start_time=time(9, 0), end_time=time(10, 0)),
            ClassSchedule(schedule_id=2, class_id=2, day_of_week=1, start_time=time(18, 0), end_time=time(19, 0)),
        ],
    )
    reservations = InMemoryReservations(
        [
            Reservation(reservation_id=1, student_id=1, class_id=1, status=ReservationStatus.RESERVED),
            Reservation(reservation_id=2, student_id=2, class_id=1, status=ReservationStatus.RESERVED),
            Reservation(reservation_id=3, student_id=3, class_id=2, status=ReservationStatus.RESERVED),
        ]
    )
    return {
        "students_repo": students,
        "classes_repo": classes,
        "reservations_repo": reservations,
        "attendance_repo": InMemoryAttendance(classes, students),
        "settings_repo": InMemorySettings(settings),
        "locations_repo": InMemoryLocations(list(locations or [])),
        "sessions_repo": InMemorySessions(),
    }


def build_world(
    clock: Optional[FakeClock] = None,
    *,
    settings: Optional[CheckInSettings] = None,
    locations: Optional[list[AcademyLocation]] = None,
    options: Optional[AppOptions] = None,
    **overrides,
) -> Container:
    repos = demo_repos(settings=settings, locations=locations)
    repos.update(overrides)
    repos.setdefault("transaction", SnapshotTransaction(repos["attendance_repo"], repos["sessions_repo"]))
    return assemble(**repos, options=options, clock=clock or FakeClock(datetime.combine(MONDAY, time(8, 50))))
