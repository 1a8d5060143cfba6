from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Daily attendance outcome stored per (student, class, date)."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class AttendanceSource(str, Enum):
    """Which flow wrote the attendance record."""

    MANUAL = "manual"
    KIOSK = "kiosk"
    BULK = "bulk"


class CheckInState(str, Enum):
    """Open/closed state of a kiosk check-in session.

    Independent of AttendanceStatus: a student can be `present` for the day
    while their check-in session is already closed.
    """

    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    AUTO_CHECKOUT = "auto_checkout"


class ReservationStatus(str, Enum):
    RESERVED = "reserved"
    CANCELLED = "cancelled"


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    FROZEN = "frozen"
    CANCELLED = "cancelled"


class PinPadState(str, Enum):
    """Kiosk keypad flow: idle -> pin_entry -> validating -> success|failure -> idle."""

    IDLE = "idle"
    PIN_ENTRY = "pin_entry"
    VALIDATING = "validating"
    SUCCESS = "success"
    FAILURE = "failure"
