from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...classes.model import ScheduledClass
from ...students.model import Student
from ..model import CheckInSettings, Coordinates


@dataclass(frozen=True)
class CheckInContext:
    """Everything a rule may look at once the student is identified."""

    student: Student
    class_id: int
    scheduled: Optional[ScheduledClass]
    now: datetime
    settings: CheckInSettings
    coordinates: Optional[Coordinates] = None


class CheckInRule(ABC):
    """Strategy Pattern: one policy check applied to a kiosk check-in."""

    @abstractmethod
    def check(self, ctx: CheckInContext) -> None:
        """Raise a CheckInRejected subclass when the check-in is not allowed."""

        raise NotImplementedError
