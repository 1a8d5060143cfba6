from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.enums import CheckInState
from ..core.exceptions import NotFoundError
from .model import CheckInSession, Coordinates
from .repository import CheckInSessionRepository
from .settings import CheckInSettingsStore

logger = logging.getLogger(__name__)


class CheckInLifecycleService:
    """Open/closed kiosk sessions: checked_in -> checked_out | auto_checkout.

    Kept apart from the daily attendance status; closing a session never
    touches the attendance record.
    """

    def __init__(
        self,
        sessions: CheckInSessionRepository,
        settings: CheckInSettingsStore,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._sessions = sessions
        self._settings = settings
        self._clock = clock

    def open(
        self,
        *,
        student_id: int,
        class_id: Optional[int],
        at: datetime,
        coordinates: Optional[Coordinates] = None,
        device_id: Optional[str] = None,
    ) -> CheckInSession:
        previous = self._sessions.get_open_for_student(int(student_id))
        if previous:
            # A student holds at most one open session.
            self._sessions.close(check_in_id=previous.check_in_id, check_out_time=at, state=CheckInState.CHECKED_OUT)

        return self._sessions.open(
            student_id=int(student_id),
            class_id=class_id,
            check_in_time=at,
            coordinates=coordinates,
            device_id=device_id,
        )

    def check_out(self, student_id: int, *, now: Optional[datetime] = None) -> CheckInSession:
        session = self._sessions.get_open_for_student(int(student_id))
        if not session:
            raise NotFoundError(f"No open check-in for student {student_id}")

        at = now or self._clock()
        self._sessions.close(check_in_id=session.check_in_id, check_out_time=at, state=CheckInState.CHECKED_OUT)
        logger.info("student %s checked out (check-in %s)", student_id, session.check_in_id)
        return CheckInSession(
            check_in_id=session.check_in_id,
            student_id=session.student_id,
            class_id=session.class_id,
            check_in_time=session.check_in_time,
            state=CheckInState.CHECKED_OUT,
            check_out_time=at,
            device_id=session.device_id,
        )

    def sweep_auto_checkout(self, now: Optional[datetime] = None) -> int:
        """Close every session open longer than auto_checkout_hours."""
        at = now or self._clock()
        cutoff = at - timedelta(hours=self._settings.current.auto_checkout_hours)
        closed = self._sessions.close_open_before(cutoff=cutoff, check_out_time=at, state=CheckInState.AUTO_CHECKOUT)
        logger.info("auto-checkout sweep at %s: %d session(s) closed", at.isoformat(timespec="seconds"), closed)
        return closed
