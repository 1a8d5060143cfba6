from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable

from ..common.datetime_utils import now_local
from ..core.exceptions import ValidationError
from .model import CheckInSettings
from .repository import CheckInSettingsRepository

logger = logging.getLogger(__name__)

_BOOL_FIELDS = {
    "kiosk_mode_enabled",
    "require_class_selection",
    "require_pin_verification",
    "location_tracking_enabled",
}
_NON_NEGATIVE_FIELDS = {"early_window_minutes", "late_window_minutes"}
_POSITIVE_FIELDS = {"auto_checkout_hours", "max_distance_meters"}


def _as_bool(name: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"1", "true", "yes", "on"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"0", "false", "no", "off"}:
        return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValidationError(f"{name} must be true or false")


def _as_int(name: str, value, *, minimum: int) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number")
    if v < minimum:
        raise ValidationError(f"{name} must be at least {minimum}")
    return v


def validate_changes(changes: dict) -> dict:
    """Check and coerce a partial settings update."""
    unknown = set(changes) - CheckInSettings.field_names()
    if unknown:
        raise ValidationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    clean: dict = {}
    for name, value in changes.items():
        if name in _BOOL_FIELDS:
            clean[name] = _as_bool(name, value)
        elif name in _NON_NEGATIVE_FIELDS:
            clean[name] = _as_int(name, value, minimum=0)
        elif name in _POSITIVE_FIELDS:
            clean[name] = _as_int(name, value, minimum=1)
        elif name == "welcome_message":
            message = (value or "").strip()
            if not message:
                raise ValidationError("welcome_message is required")
            clean[name] = message
    return clean


class CheckInSettingsStore:
    """Holds the current policy snapshot.

    Loaded explicitly with `reload()`; `update()` persists a partial change and
    swaps the snapshot, so the next gate evaluation sees it.
    """

    def __init__(self, repo: CheckInSettingsRepository, *, clock: Callable[[], datetime] = now_local):
        self._repo = repo
        self._clock = clock
        self._lock = threading.Lock()
        self._current = CheckInSettings()

    @property
    def current(self) -> CheckInSettings:
        return self._current

    def reload(self) -> CheckInSettings:
        loaded = self._repo.get() or CheckInSettings()
        with self._lock:
            self._current = loaded
        return loaded

    def update(self, **changes) -> CheckInSettings:
        clean = validate_changes(changes)
        if not clean:
            raise ValidationError("No settings to update")

        with self._lock:
            saved = self._repo.save(self._current.with_changes(**clean), now=self._clock())
            self._current = saved
        logger.info("check-in settings updated: %s", ", ".join(sorted(clean)))
        return saved
