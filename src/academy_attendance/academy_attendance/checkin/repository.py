from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CheckInState
from .model import AcademyLocation, CheckInSession, CheckInSettings, Coordinates


class CheckInSettingsRepository(Protocol):
    def get(self) -> Optional[CheckInSettings]:
        raise NotImplementedError

    def save(self, settings: CheckInSettings, *, now: datetime) -> CheckInSettings:
        """Upsert the single settings row; returns it with settings_id filled."""

        raise NotImplementedError


class AcademyLocationRepository(Protocol):
    def list_active(self) -> Sequence[AcademyLocation]:
        raise NotImplementedError


class CheckInSessionRepository(Protocol):
    def open(
        self,
        *,
        student_id: int,
        class_id: Optional[int],
        check_in_time: datetime,
        coordinates: Optional[Coordinates] = None,
        device_id: Optional[str] = None,
    ) -> CheckInSession:
        raise NotImplementedError

    def get_open_for_student(self, student_id: int) -> Optional[CheckInSession]:
        raise NotImplementedError

    def close(self, *, check_in_id: int, check_out_time: datetime, state: CheckInState) -> bool:
        """Close one session if it is still open."""

        raise NotImplementedError

    def close_open_before(self, *, cutoff: datetime, check_out_time: datetime, state: CheckInState) -> int:
        """Close every session opened before `cutoff` and still open; returns how many."""

        raise NotImplementedError
