from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import datetime
from typing import Callable, ContextManager, Optional

from ..attendance.service import AttendanceLedger
from ..classes.model import ScheduledClass
from ..classes.service import ClassService
from ..common.datetime_utils import now_local
from ..common.validators import require_pin, require_positive_id
from ..core.enums import AttendanceSource, AttendanceStatus
from ..core.exceptions import (
    AmbiguousPinError,
    CheckInRejected,
    InvalidPinError,
    NotFoundError,
    OutsideCheckInWindowError,
    ValidationError,
)
from ..students.model import Student
from ..students.repository import StudentRepository
from .lifecycle import CheckInLifecycleService
from .model import CheckInResult, CheckInSettings, Coordinates
from .rules.base import CheckInContext
from .rules.factory import CheckInRuleFactory
from .rules.window_rule import check_in_window
from .settings import CheckInSettingsStore

logger = logging.getLogger(__name__)

DEFAULT_DEVICE = "kiosk"


class CheckInGate:
    """Kiosk check-in: identify, pick the class, apply policy, write.

    Steps run in a fixed order. A well-formed PIN is still rejected when the
    class window or location check fails. The PIN itself never reaches a log.
    """

    def __init__(
        self,
        students: StudentRepository,
        classes: ClassService,
        ledger: AttendanceLedger,
        settings: CheckInSettingsStore,
        lifecycle: CheckInLifecycleService,
        *,
        rule_factory: CheckInRuleFactory,
        transaction: Callable[[], ContextManager] = nullcontext,
        clock: Callable[[], datetime] = now_local,
    ):
        self._students = students
        self._classes = classes
        self._ledger = ledger
        self._settings = settings
        self._lifecycle = lifecycle
        self._rule_factory = rule_factory
        self._transaction = transaction
        self._clock = clock

    def check_in_with_pin(
        self,
        pin: str,
        *,
        class_id: Optional[int] = None,
        coordinates: Optional[Coordinates] = None,
        device_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CheckInResult:
        pin = require_pin(pin)
        device = device_id or DEFAULT_DEVICE

        matches = list(self._students.find_active_by_pin(pin, limit=2))
        if not matches:
            logger.warning("kiosk check-in rejected on %r: unknown PIN", device)
            raise InvalidPinError("no active student holds this PIN")
        if len(matches) > 1:
            logger.warning("kiosk check-in rejected on %r: PIN shared by several active students", device)
            raise AmbiguousPinError("PIN matches more than one active student")

        return self._admit(matches[0], class_id=class_id, coordinates=coordinates, device_id=device_id, now=now)

    def check_in_student(
        self,
        student_id: int,
        *,
        class_id: Optional[int] = None,
        coordinates: Optional[Coordinates] = None,
        device_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CheckInResult:
        """Staff-assisted check-in by id; only allowed with PIN verification off."""
        if self._settings.current.require_pin_verification:
            raise ValidationError("PIN verification is required for check-in")

        student_id = require_positive_id(student_id, "student_id")
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        if not student.is_active:
            raise ValidationError("Student membership is not active")

        return self._admit(student, class_id=class_id, coordinates=coordinates, device_id=device_id, now=now)

    def _admit(
        self,
        student: Student,
        *,
        class_id: Optional[int],
        coordinates: Optional[Coordinates],
        device_id: Optional[str],
        now: Optional[datetime],
    ) -> CheckInResult:
        now = now or self._clock()
        settings = self._settings.current

        try:
            chosen_id, scheduled = self._resolve_class(class_id, now, settings)
            ctx = CheckInContext(
                student=student,
                class_id=chosen_id,
                scheduled=scheduled,
                now=now,
                settings=settings,
                coordinates=coordinates,
            )
            for rule in self._rule_factory.for_settings(settings):
                rule.check(ctx)
        except CheckInRejected as exc:
            logger.warning("kiosk check-in rejected for student %s: %s", student.student_id, exc)
            raise

        # The present mark and the open session commit together.
        with self._transaction():
            record = self._ledger.mark_single(
                student.student_id,
                chosen_id,
                now.date(),
                AttendanceStatus.PRESENT,
                None,
                source=AttendanceSource.KIOSK,
            )
            self._lifecycle.open(
                student_id=student.student_id,
                class_id=chosen_id,
                at=now,
                coordinates=coordinates,
                device_id=device_id,
            )
        logger.info("kiosk check-in: student %s class %s", student.student_id, chosen_id)

        return CheckInResult(
            student_id=student.student_id,
            student_name=student.display_name,
            class_id=chosen_id,
            attendance_id=record.attendance_id,
            timestamp=now,
        )

    def _resolve_class(
        self, class_id: Optional[int], now: datetime, settings: CheckInSettings
    ) -> tuple[int, Optional[ScheduledClass]]:
        if class_id is not None:
            session = self._classes.require(require_positive_id(class_id, "class_id"))
            return session.class_id, self._classes.slot_for(session.class_id, now.date(), near=now)

        if settings.require_class_selection:
            raise ValidationError("Please select a class to check in")

        today = now.date()
        open_now = [s for s in self._classes.scheduled_on(today) if check_in_window(s, today, settings).contains(now)]
        if not open_now:
            raise OutsideCheckInWindowError("no class is open for check-in right now")

        # Overlapping windows: the slot starting closest to now wins.
        best = min(open_now, key=lambda s: abs((s.starts_at(today) - now).total_seconds()))
        return best.class_id, best
