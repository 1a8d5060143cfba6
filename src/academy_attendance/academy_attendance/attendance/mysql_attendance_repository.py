from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceSource, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .model import AttendanceHistoryRow, AttendanceQuery, AttendanceRecord, RecentCheckIn
from .repository import AttendanceRepository

_RECORD_COLUMNS = (
    "attendance_id, student_id, class_id, attendance_date, status, notes, source, created_at, updated_at"
)


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        source=AttendanceSource(r["source"]),
        created_at=r["created_at"],
        notes=r.get("notes"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_key(self, *, student_id: int, class_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND class_id=%s AND attendance_date=%s
                """,
                (int(student_id), int(class_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_class_and_date(self, *, class_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE class_id=%s AND attendance_date=%s
                """,
                (int(class_id), attendance_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def upsert(
        self,
        *,
        student_id: int,
        class_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        notes: Optional[str],
        source: AttendanceSource,
        now: datetime,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, class_id, attendance_date, status, notes, source, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status), notes=VALUES(notes), source=VALUES(source), updated_at=%s
                """,
                (int(student_id), int(class_id), attendance_date, status.value, notes, source.value, now, now),
            )
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND class_id=%s AND attendance_date=%s
                """,
                (int(student_id), int(class_id), attendance_date),
            )
            return _to_record(fetchone(cur))

    def insert_missing(
        self,
        *,
        class_id: int,
        attendance_date: date,
        student_ids: Sequence[int],
        status: AttendanceStatus,
        notes: Optional[str],
        source: AttendanceSource,
        now: datetime,
    ) -> int:
        if not student_ids:
            return 0
        rows = [
            (int(sid), int(class_id), attendance_date, status.value, notes, source.value, now)
            for sid in student_ids
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            # IGNORE skips rows whose natural key already exists (e.g. marked meanwhile).
            cur.executemany(
                """
                INSERT IGNORE INTO attendance_records(student_id, class_id, attendance_date, status, notes, source, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
            return int(cur.rowcount or 0)

    def replace_for_students(
        self,
        *,
        class_id: int,
        attendance_date: date,
        student_ids: Sequence[int],
        status: AttendanceStatus,
        notes: Optional[str],
        source: AttendanceSource,
        now: datetime,
    ) -> int:
        ids = [int(sid) for sid in student_ids]
        if not ids:
            return 0
        rows = [(sid, int(class_id), attendance_date, status.value, notes, source.value, now) for sid in ids]

        # One connection, one transaction: db_cursor commits after both statements or rolls back.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                DELETE FROM attendance_records
                WHERE class_id=%s AND attendance_date=%s AND student_id IN ({in_placeholders(ids)})
                """,
                (int(class_id), attendance_date, *ids),
            )
            cur.executemany(
                """
                INSERT INTO attendance_records(student_id, class_id, attendance_date, status, notes, source, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
            return len(rows)

    def query(self, query: AttendanceQuery) -> Sequence[AttendanceHistoryRow]:
        clauses: list[str] = []
        params: list[object] = []

        if query.student_id is not None:
            clauses.append("ar.student_id=%s")
            params.append(int(query.student_id))
        if query.class_id is not None:
            clauses.append("ar.class_id=%s")
            params.append(int(query.class_id))
        if query.start is not None:
            clauses.append("ar.attendance_date >= %s")
            params.append(query.start)
        if query.end is not None:
            clauses.append("ar.attendance_date <= %s")
            params.append(query.end)
        if query.status is not None:
            clauses.append("ar.status=%s")
            params.append(query.status.value)

        where = " AND ".join(clauses) if clauses else "1=1"
        limit_sql = ""
        if query.limit is not None:
            limit_sql = "LIMIT %s"
            params.append(int(query.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.student_id, ar.class_id, ar.attendance_date,
                    ar.status, ar.source, ar.notes, ar.created_at,
                    c.name AS class_name, i.full_name AS instructor_name
                FROM attendance_records ar
                LEFT JOIN classes c ON c.class_id = ar.class_id
                LEFT JOIN instructors i ON i.instructor_id = c.instructor_id
                WHERE {where}
                ORDER BY ar.attendance_date DESC, ar.created_at DESC
                {limit_sql}
                """,
                tuple(params),
            )
            return [
                AttendanceHistoryRow(
                    attendance_id=int(r["attendance_id"]),
                    student_id=int(r["student_id"]),
                    class_id=int(r["class_id"]),
                    class_name=r.get("class_name") or "Unknown Class",
                    instructor_name=r.get("instructor_name") or "Unknown Instructor",
                    attendance_date=r["attendance_date"],
                    status=AttendanceStatus(r["status"]),
                    source=AttendanceSource(r["source"]),
                    created_at=r["created_at"],
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]

    def list_recent_checkins(self, *, on_date: date, limit: int) -> Sequence[RecentCheckIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ar.attendance_id, ar.student_id, ar.class_id, ar.source, ar.created_at,
                       s.first_name, s.last_name, s.belt_level
                FROM attendance_records ar
                JOIN students s ON s.student_id = ar.student_id
                WHERE ar.attendance_date=%s AND ar.status=%s
                ORDER BY ar.created_at DESC, ar.attendance_id DESC
                LIMIT %s
                """,
                (on_date, AttendanceStatus.PRESENT.value, int(limit)),
            )
            return [
                RecentCheckIn(
                    attendance_id=int(r["attendance_id"]),
                    student_id=int(r["student_id"]),
                    student_name=f"{r['first_name']} {r['last_name']}".strip(),
                    belt_level=r.get("belt_level"),
                    class_id=int(r["class_id"]),
                    source=AttendanceSource(r["source"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
