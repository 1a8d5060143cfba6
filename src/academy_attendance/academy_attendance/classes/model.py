from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import ReservationStatus


@dataclass(frozen=True)
class ClassSession:
    """Domain entity: a recurring class offered by the academy."""

    class_id: int
    name: str
    capacity: int
    instructor_id: Optional[int] = None
    instructor_name: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class ClassSchedule:
    """One weekly slot of a class. day_of_week: 0=Sunday .. 6=Saturday."""

    schedule_id: int
    class_id: int
    day_of_week: int
    start_time: time
    end_time: time

    @property
    def ends_after_start(self) -> bool:
        return self.end_time > self.start_time


@dataclass(frozen=True)
class ScheduledClass:
    """Read-model: a class together with the slot it runs in on some day."""

    session: ClassSession
    schedule: ClassSchedule

    @property
    def class_id(self) -> int:
        return self.session.class_id

    def starts_at(self, on_date: date) -> datetime:
        return datetime.combine(on_date, self.schedule.start_time)

    def ends_at(self, on_date: date) -> datetime:
        return datetime.combine(on_date, self.schedule.end_time)


@dataclass(frozen=True)
class Reservation:
    reservation_id: int
    student_id: int
    class_id: int
    status: ReservationStatus
