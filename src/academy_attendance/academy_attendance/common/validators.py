from __future__ import annotations

from typing import Optional

from ..core.constants import PIN_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_pin(value: Optional[str]) -> str:
    pin = (value or "").strip()
    # ASCII digits only; the keypad has no others.
    if len(pin) != PIN_LENGTH or not (pin.isascii() and pin.isdigit()):
        raise ValidationError(f"PIN must be exactly {PIN_LENGTH} digits")
    return pin


def require_status(value) -> AttendanceStatus:
    """Coerce a status string into the closed AttendanceStatus enum."""
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Invalid status {value!r} (expected one of: {allowed})")


def require_positive_id(value, field_name: str) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id")
    if v <= 0:
        raise ValidationError(f"{field_name} is not a valid id")
    return v


def clean_notes(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None
