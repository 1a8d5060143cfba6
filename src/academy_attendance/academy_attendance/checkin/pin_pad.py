from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import PIN_LENGTH, PIN_PAD_IDLE_SECONDS
from ..core.enums import PinPadState
from ..core.exceptions import (
    GENERIC_CHECKIN_FAILURE,
    CheckInRejected,
    NotFoundError,
    RemoteWriteError,
    ValidationError,
)
from .gate import CheckInGate
from .model import CheckInResult, Coordinates
from .settings import CheckInSettingsStore

logger = logging.getLogger(__name__)


class KioskPinPad:
    """Keypad state for one kiosk screen.

    Digits are only collected in IDLE/PIN_ENTRY. SUCCESS and FAILURE stay on
    screen until `acknowledge()` or until the pad has been idle for
    `idle_seconds`, then everything returns to IDLE. While IDLE the pad shows
    the welcome message from the check-in settings.
    """

    def __init__(
        self,
        gate: CheckInGate,
        settings: CheckInSettingsStore,
        *,
        idle_seconds: int = PIN_PAD_IDLE_SECONDS,
        device_id: Optional[str] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._gate = gate
        self._settings = settings
        self._idle = timedelta(seconds=int(idle_seconds))
        self._device_id = device_id
        self._clock = clock

        self.state = PinPadState.IDLE
        self.message: Optional[str] = settings.current.welcome_message
        self.last_result: Optional[CheckInResult] = None
        self._digits = ""
        self._last_activity = clock()

    @property
    def masked(self) -> str:
        return "*" * len(self._digits)

    @property
    def digit_count(self) -> int:
        return len(self._digits)

    def press(self, digit: str) -> PinPadState:
        self.tick()
        if self.state not in (PinPadState.IDLE, PinPadState.PIN_ENTRY):
            return self.state
        if len(digit) != 1 or not (digit.isascii() and digit.isdigit()):
            return self.state

        self._touch()
        self.message = None
        if len(self._digits) < PIN_LENGTH:
            self._digits += digit
        self.state = PinPadState.PIN_ENTRY
        return self.state

    def backspace(self) -> PinPadState:
        if self.state == PinPadState.PIN_ENTRY:
            self._touch()
            self._digits = self._digits[:-1]
            if not self._digits:
                self._reset()
        return self.state

    def clear(self) -> PinPadState:
        if self.state == PinPadState.PIN_ENTRY:
            self._reset()
        return self.state

    def submit(self, *, class_id: Optional[int] = None, coordinates: Optional[Coordinates] = None) -> PinPadState:
        self.tick()
        if self.state != PinPadState.PIN_ENTRY:
            return self.state
        if len(self._digits) != PIN_LENGTH:
            # Stays on the keypad; nothing is sent.
            self.message = f"Enter your {PIN_LENGTH}-digit PIN"
            return self.state

        pin, self._digits = self._digits, ""
        self.state = PinPadState.VALIDATING
        self._touch()
        try:
            result = self._gate.check_in_with_pin(
                pin,
                class_id=class_id,
                coordinates=coordinates,
                device_id=self._device_id,
            )
        except CheckInRejected as exc:
            return self._fail(exc.user_message)
        except (ValidationError, NotFoundError) as exc:
            return self._fail(str(exc))
        except RemoteWriteError:
            logger.exception("kiosk check-in could not be written")
            return self._fail(GENERIC_CHECKIN_FAILURE)

        self.last_result = result
        self.message = f"Welcome, {result.student_name}!"
        self.state = PinPadState.SUCCESS
        return self.state

    def acknowledge(self) -> PinPadState:
        if self.state in (PinPadState.SUCCESS, PinPadState.FAILURE):
            self._reset()
        return self.state

    def tick(self) -> bool:
        """Return to IDLE if nothing happened for idle_seconds. True if it did."""
        if self.state == PinPadState.IDLE:
            return False
        if self._clock() - self._last_activity < self._idle:
            return False
        self._reset()
        return True

    def _fail(self, message: str) -> PinPadState:
        self.last_result = None
        self.message = message
        self.state = PinPadState.FAILURE
        return self.state

    def _reset(self) -> None:
        self._digits = ""
        self.message = self._settings.current.welcome_message
        self.last_result = None
        self.state = PinPadState.IDLE
        self._touch()

    def _touch(self) -> None:
        self._last_activity = self._clock()
