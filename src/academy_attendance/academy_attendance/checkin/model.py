from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Optional

from ..core.constants import (
    DEFAULT_AUTO_CHECKOUT_HOURS,
    DEFAULT_EARLY_WINDOW_MINUTES,
    DEFAULT_LATE_WINDOW_MINUTES,
    DEFAULT_MAX_DISTANCE_METERS,
    DEFAULT_WELCOME_MESSAGE,
)
from ..core.enums import CheckInState


@dataclass(frozen=True)
class CheckInSettings:
    """Immutable kiosk policy snapshot.

    Gate and kiosk read the current snapshot per operation; an admin edit
    produces a new snapshot instead of mutating this one.
    """

    kiosk_mode_enabled: bool = False
    auto_checkout_hours: int = DEFAULT_AUTO_CHECKOUT_HOURS
    require_class_selection: bool = False
    early_window_minutes: int = DEFAULT_EARLY_WINDOW_MINUTES
    late_window_minutes: int = DEFAULT_LATE_WINDOW_MINUTES
    require_pin_verification: bool = True
    location_tracking_enabled: bool = False
    max_distance_meters: int = DEFAULT_MAX_DISTANCE_METERS
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    settings_id: Optional[int] = None

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls) if f.name != "settings_id")

    def with_changes(self, **changes) -> "CheckInSettings":
        return replace(self, **changes)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class AcademyLocation:
    location_id: int
    name: str
    latitude: float
    longitude: float
    address: Optional[str] = None


@dataclass(frozen=True)
class CheckInSession:
    """Open/closed kiosk session, separate from the daily attendance status."""

    check_in_id: int
    student_id: int
    class_id: Optional[int]
    check_in_time: datetime
    state: CheckInState
    check_out_time: Optional[datetime] = None
    device_id: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state == CheckInState.CHECKED_IN


@dataclass(frozen=True)
class CheckInWindow:
    opens_at: datetime
    closes_at: datetime

    def contains(self, moment: datetime) -> bool:
        return self.opens_at <= moment <= self.closes_at


@dataclass(frozen=True)
class CheckInResult:
    student_id: int
    student_name: str
    class_id: int
    attendance_id: int
    timestamp: datetime
