from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.http import date_arg, int_arg
from ..common.serialization import to_jsonable
from ..container import Container

DEFAULT_RANGE_DAYS = 90


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/<int:student_id>/attendance/stats", methods=["GET"], endpoint="api_student_stats")
    def api_student_stats(student_id: int):
        today = container.clock().date()
        end = date_arg("end", today)
        start = date_arg("start", end - timedelta(days=DEFAULT_RANGE_DAYS - 1))

        snapshot = container.stats_service.student_snapshot(
            student_id,
            start=start,
            end=end,
            class_id=int_arg("class_id"),
            status=request.args.get("status") or None,
        )
        return jsonify(
            {
                "student_id": student_id,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "stats": to_jsonable(snapshot),
            }
        )
