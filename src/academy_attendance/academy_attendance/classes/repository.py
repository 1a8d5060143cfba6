from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassSession, Reservation, ScheduledClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def list_scheduled_for_day(self, day_of_week: int) -> Sequence[ScheduledClass]:
        """Active classes with a slot on `day_of_week`, ordered by start time."""

        raise NotImplementedError


class ReservationRepository(Protocol):
    def list_reserved_for_class(self, class_id: int) -> Sequence[Reservation]:
        """Reservations in `reserved` status; cancelled ones are excluded."""

        raise NotImplementedError
