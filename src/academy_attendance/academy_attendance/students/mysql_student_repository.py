from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import MembershipStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, first_name, last_name, email, belt_level, membership_status"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r.get("email"),
        belt_level=r.get("belt_level"),
        membership_status=MembershipStatus(r.get("membership_status") or "active"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_many(self, student_ids: Iterable[int]) -> Sequence[Student]:
        ids = [int(i) for i in student_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE student_id IN ({in_placeholders(ids)})",
                tuple(ids),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def find_active_by_pin(self, pin: str, *, limit: int = 2) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE check_in_pin=%s AND membership_status=%s
                LIMIT %s
                """,
                (pin, MembershipStatus.ACTIVE.value, int(limit)),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def pin_in_use(self, pin: str, *, exclude_student_id: Optional[int] = None) -> bool:
        sql = "SELECT 1 FROM students WHERE check_in_pin=%s AND membership_status=%s"
        params: list[object] = [pin, MembershipStatus.ACTIVE.value]
        if exclude_student_id is not None:
            sql += " AND student_id<>%s"
            params.append(int(exclude_student_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            return fetchone(cur) is not None

    def set_pin(self, *, student_id: int, pin: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET check_in_pin=%s WHERE student_id=%s", (pin, int(student_id)))
            return cur.rowcount > 0
