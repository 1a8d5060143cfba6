from __future__ import annotations

from datetime import date

from flask import Flask, Response, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import date_arg, int_arg, json_body
from ..common.serialization import to_jsonable
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from .export import export_filename, history_csv
from .roster import search, summarize


def _body_date(data: dict, today: date) -> date:
    raw = str(data.get("date") or "").strip()
    return parse_iso_date(raw) if raw else today


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes/today", methods=["GET"], endpoint="api_classes_today")
    def api_classes_today():
        day = date_arg("date", container.clock().date())
        scheduled = container.class_service.scheduled_on(day)
        return jsonify(
            {
                "date": day.isoformat(),
                "classes": [
                    {
                        "class_id": s.class_id,
                        "name": s.session.name,
                        "instructor_name": s.session.instructor_name,
                        "capacity": s.session.capacity,
                        "start_time": s.schedule.start_time.strftime("%H:%M"),
                        "end_time": s.schedule.end_time.strftime("%H:%M"),
                    }
                    for s in scheduled
                ],
            }
        )

    @app.route("/api/classes/<int:class_id>/roster", methods=["GET"], endpoint="api_class_roster")
    def api_class_roster(class_id: int):
        day = date_arg("date", container.clock().date())
        entries = container.roster_resolver.resolve(class_id, day)
        visible = search(entries, request.args.get("q"))
        return jsonify(
            {
                "class_id": class_id,
                "date": day.isoformat(),
                "summary": to_jsonable(summarize(entries)),
                "students": to_jsonable(visible),
            }
        )

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    def api_attendance_mark():
        data = json_body()
        for key in ("student_id", "class_id", "status"):
            if data.get(key) in (None, ""):
                raise ValidationError(f"{key} is required")

        record = container.ledger.mark_single(
            data["student_id"],
            data["class_id"],
            _body_date(data, container.clock().date()),
            data["status"],
            data.get("notes"),
        )
        return jsonify({"success": True, "record": to_jsonable(record)})

    @app.route("/api/classes/<int:class_id>/attendance/bulk", methods=["POST"], endpoint="api_attendance_bulk")
    def api_attendance_bulk(class_id: int):
        data = json_body()
        student_ids = data.get("student_ids")
        if not isinstance(student_ids, list):
            raise ValidationError("student_ids must be a list")
        if not data.get("status"):
            raise ValidationError("status is required")

        written = container.bulk_service.mark(
            student_ids,
            data["status"],
            class_id,
            _body_date(data, container.clock().date()),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "updated": written})

    @app.route(
        "/api/classes/<int:class_id>/attendance/mark-unmarked-absent",
        methods=["POST"],
        endpoint="api_attendance_mark_unmarked",
    )
    def api_attendance_mark_unmarked(class_id: int):
        marked = container.ledger.mark_unmarked_as_absent(class_id, _body_date(json_body(), container.clock().date()))
        return jsonify({"success": True, "marked": len(marked), "student_ids": marked})

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_query")
    def api_attendance_query():
        limit = int_arg("limit")
        rows = container.ledger.query(
            student_id=int_arg("student_id"),
            class_id=int_arg("class_id"),
            start=date_arg("start"),
            end=date_arg("end"),
            status=request.args.get("status") or None,
            limit=limit or DEFAULT_HISTORY_LIMIT,
        )
        return jsonify({"records": to_jsonable(rows)})

    @app.route("/api/students/<int:student_id>/attendance.csv", methods=["GET"], endpoint="api_attendance_csv")
    def api_attendance_csv(student_id: int):
        rows = container.ledger.query(
            student_id=student_id,
            class_id=int_arg("class_id"),
            start=date_arg("start"),
            end=date_arg("end"),
            status=request.args.get("status") or None,
        )
        filename = export_filename(container.clock().date())
        return Response(
            history_csv(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
