from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import MembershipStatus


@dataclass(frozen=True)
class Student:
    """Domain entity: a student of the academy.

    The check-in PIN is deliberately not part of this object; it stays in the
    store and is only ever compared there.
    """

    student_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    belt_level: Optional[str] = None
    membership_status: MembershipStatus = MembershipStatus.ACTIVE

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.membership_status == MembershipStatus.ACTIVE
