from __future__ import annotations

from datetime import date, datetime

from src.academy_attendance.academy_attendance.attendance.export import export_filename, history_csv
from src.academy_attendance.academy_attendance.attendance.model import AttendanceHistoryRow
from src.academy_attendance.academy_attendance.core.enums import AttendanceSource, AttendanceStatus


def _row(i: int, day: date, status: AttendanceStatus, notes=None) -> AttendanceHistoryRow:
    return AttendanceHistoryRow(
        attendance_id=i,
        student_id=1,
        class_id=1,
        class_name="Beginner Karate",
        instructor_name="Sensei Johnson",
        attendance_date=day,
        status=status,
        source=AttendanceSource.MANUAL,
        created_at=datetime.combine(day, datetime.min.time()),
        notes=notes,
    )


def test_three_records_give_header_plus_three_lines():
    rows = [
        _row(3, date(2026, 10, 19), AttendanceStatus.PRESENT),
        _row(2, date(2026, 10, 12), AttendanceStatus.LATE, "bus, then rain"),
        _row(1, date(2026, 10, 5), AttendanceStatus.ABSENT),
    ]

    lines = history_csv(rows).split("\n")

    assert len(lines) == 4
    assert lines[0] == "Date,Class,Instructor,Status,Notes"
    assert lines[1] == "2026-10-19,Beginner Karate,Sensei Johnson,present,"
    assert lines[2] == '2026-10-12,Beginner Karate,Sensei Johnson,late,"bus, then rain"'


def test_empty_export_is_header_only():
    assert history_csv([]) == "Date,Class,Instructor,Status,Notes"


def test_export_filename_uses_today():
    assert export_filename(date(2026, 10, 19)) == "my-attendance-2026-10-19.csv"
