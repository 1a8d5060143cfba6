from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/<int:student_id>/pin", methods=["POST"], endpoint="api_student_pin")
    def api_student_pin(student_id: int):
        """Set the given PIN, or generate one when the body has none."""
        pin = str(json_body().get("pin") or "").strip()
        if pin:
            container.student_service.assign_pin(student_id, pin)
            return jsonify({"success": True})

        generated = container.student_service.generate_pin(student_id)
        return jsonify({"success": True, "pin": generated})
