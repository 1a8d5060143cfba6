from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable

from ..core.constants import CSV_FILENAME_TEMPLATE, CSV_HEADER
from .model import AttendanceHistoryRow


def history_csv(rows: Iterable[AttendanceHistoryRow]) -> str:
    """Header line then one line per record: Date, Class, Instructor, Status, Notes."""

    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in rows:
        writer.writerow(
            [
                r.attendance_date.strftime("%Y-%m-%d"),
                r.class_name,
                r.instructor_name,
                r.status.value,
                r.notes or "",
            ]
        )
    return out.getvalue().rstrip("\n")


def export_filename(today: date) -> str:
    return CSV_FILENAME_TEMPLATE.format(day=today.strftime("%Y-%m-%d"))
