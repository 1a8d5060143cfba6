from __future__ import annotations

import logging
import secrets

from ..common.validators import require_pin, require_positive_id
from ..core.constants import PIN_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    """PIN assignment.

    Uniqueness among active students is enforced here so the kiosk gate only
    ever has to detect (never resolve) an ambiguous PIN.
    """

    def __init__(self, students: StudentRepository, *, max_generate_attempts: int = 50):
        self._students = students
        self._max_generate_attempts = int(max_generate_attempts)

    def assign_pin(self, student_id: int, pin: str) -> None:
        student_id = require_positive_id(student_id, "student_id")
        pin = require_pin(pin)

        if not self._students.get_by_id(student_id):
            raise NotFoundError(f"Student {student_id} not found")
        if self._students.pin_in_use(pin, exclude_student_id=student_id):
            raise ValidationError("PIN is already used by another active student")

        self._students.set_pin(student_id=student_id, pin=pin)
        logger.info("check-in PIN updated for student %s", student_id)

    def generate_pin(self, student_id: int) -> str:
        """Assign and return a random unused PIN."""
        for _ in range(self._max_generate_attempts):
            candidate = "".join(secrets.choice("0123456789") for _ in range(PIN_LENGTH))
            if not self._students.pin_in_use(candidate, exclude_student_id=student_id):
                self.assign_pin(student_id, candidate)
                return candidate
        raise ValidationError("Could not find an unused PIN, try again")
