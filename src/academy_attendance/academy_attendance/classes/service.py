from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import day_of_week
from ..core.exceptions import NotFoundError
from .model import ClassSession, ScheduledClass
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    def __init__(self, classes: ClassRepository):
        self._classes = classes

    def require(self, class_id: int) -> ClassSession:
        session = self._classes.get_by_id(int(class_id))
        if not session:
            raise NotFoundError(f"Class {class_id} not found")
        return session

    def scheduled_on(self, on_date: date) -> Sequence[ScheduledClass]:
        """Slots running on `on_date`. Slots that do not end after they start are skipped."""
        slots = []
        for s in self._classes.list_scheduled_for_day(day_of_week(on_date)):
            if not s.schedule.ends_after_start:
                logger.warning(
                    "schedule %s of class %s skipped: ends at %s, not after its %s start",
                    s.schedule.schedule_id,
                    s.class_id,
                    s.schedule.end_time.strftime("%H:%M"),
                    s.schedule.start_time.strftime("%H:%M"),
                )
                continue
            slots.append(s)
        return slots

    def slot_for(self, class_id: int, on_date: date, *, near: Optional[datetime] = None) -> Optional[ScheduledClass]:
        """The slot `class_id` runs in on `on_date`.

        With several slots the same day, the one whose start is closest to
        `near` wins.
        """

        slots = [s for s in self.scheduled_on(on_date) if s.class_id == int(class_id)]
        if not slots:
            return None
        if near is None or len(slots) == 1:
            return slots[0]
        return min(slots, key=lambda s: abs((s.starts_at(on_date) - near).total_seconds()))
