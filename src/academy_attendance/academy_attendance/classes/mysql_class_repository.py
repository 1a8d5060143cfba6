from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ReservationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ClassSchedule, ClassSession, Reservation, ScheduledClass
from .repository import ClassRepository, ReservationRepository


def _to_session(r: dict) -> ClassSession:
    return ClassSession(
        class_id=int(r["class_id"]),
        name=r["name"],
        capacity=int(r.get("max_students") or 0),
        instructor_id=int(r["instructor_id"]) if r.get("instructor_id") is not None else None,
        instructor_name=r.get("instructor_name"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.name, c.max_students, c.instructor_id, c.is_active,
                       i.full_name AS instructor_name
                FROM classes c
                LEFT JOIN instructors i ON i.instructor_id = c.instructor_id
                WHERE c.class_id=%s
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_scheduled_for_day(self, day_of_week: int) -> Sequence[ScheduledClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.name, c.max_students, c.instructor_id, c.is_active,
                       i.full_name AS instructor_name,
                       s.schedule_id, s.day_of_week, s.start_time, s.end_time
                FROM class_schedules s
                JOIN classes c ON c.class_id = s.class_id
                LEFT JOIN instructors i ON i.instructor_id = c.instructor_id
                WHERE s.day_of_week=%s AND c.is_active=1
                ORDER BY s.start_time ASC, c.class_id ASC
                """,
                (int(day_of_week),),
            )
            return [
                ScheduledClass(
                    session=_to_session(r),
                    schedule=ClassSchedule(
                        schedule_id=int(r["schedule_id"]),
                        class_id=int(r["class_id"]),
                        day_of_week=int(r["day_of_week"]),
                        start_time=normalize_mysql_time(r["start_time"]),
                        end_time=normalize_mysql_time(r["end_time"]),
                    ),
                )
                for r in fetchall(cur)
            ]


class MySQLReservationRepository(ReservationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_reserved_for_class(self, class_id: int) -> Sequence[Reservation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT reservation_id, student_id, class_id, status
                FROM class_reservations
                WHERE class_id=%s AND status=%s
                ORDER BY reservation_id ASC
                """,
                (int(class_id), ReservationStatus.RESERVED.value),
            )
            return [
                Reservation(
                    reservation_id=int(r["reservation_id"]),
                    student_id=int(r["student_id"]),
                    class_id=int(r["class_id"]),
                    status=ReservationStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]
