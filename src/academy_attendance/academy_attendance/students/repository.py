from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_many(self, student_ids: Iterable[int]) -> Sequence[Student]:
        raise NotImplementedError

    def find_active_by_pin(self, pin: str, *, limit: int = 2) -> Sequence[Student]:
        """Active students whose PIN equals `pin`.

        The comparison runs store-side; callers never see PIN values. `limit`
        of 2 is enough to tell "exactly one" from "ambiguous".
        """

        raise NotImplementedError

    def pin_in_use(self, pin: str, *, exclude_student_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def set_pin(self, *, student_id: int, pin: str) -> bool:
        raise NotImplementedError
