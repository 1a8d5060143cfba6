from __future__ import annotations

from flask import Flask, jsonify
from flask_limiter import Limiter

from ..common.http import json_body
from ..common.limits import identity_failed, pin_failure_limit, record_identity_failure
from ..common.serialization import to_jsonable
from ..container import Container
from ..core.exceptions import AmbiguousPinError, CheckInRejected, InvalidPinError, ValidationError
from .model import Coordinates


def _coordinates(data: dict):
    lat, lng = data.get("latitude"), data.get("longitude")
    if lat is None and lng is None:
        return None
    try:
        return Coordinates(
            latitude=float(lat),
            longitude=float(lng),
            accuracy=float(data["accuracy"]) if data.get("accuracy") is not None else None,
        )
    except (TypeError, ValueError):
        raise ValidationError("latitude and longitude must be numbers")


def register(app: Flask, container: Container, limiter: Limiter) -> None:
    options = container.options

    @app.route("/api/kiosk/check-in", methods=["POST"], endpoint="api_kiosk_check_in")
    @limiter.limit(
        pin_failure_limit(options.pin_max_failed_attempts, options.pin_lockout_seconds),
        deduct_when=identity_failed,
    )
    def api_kiosk_check_in():
        data = json_body()
        kwargs = {
            "class_id": data.get("class_id") or None,
            "coordinates": _coordinates(data),
            "device_id": data.get("device_id") or None,
        }
        try:
            if data.get("student_id") is not None and not data.get("pin"):
                result = container.checkin_gate.check_in_student(data["student_id"], **kwargs)
            else:
                result = container.checkin_gate.check_in_with_pin(str(data.get("pin") or ""), **kwargs)
        except (InvalidPinError, AmbiguousPinError) as e:
            # Only identity failures count toward the per-address limit.
            record_identity_failure()
            return jsonify({"success": False, "error": e.user_message})
        except CheckInRejected as e:
            # Rejections are an expected outcome for the kiosk, not an HTTP error.
            return jsonify({"success": False, "error": e.user_message})

        return jsonify(
            {
                "success": True,
                "student_name": result.student_name,
                "student_id": result.student_id,
                "class_id": result.class_id,
                "timestamp": result.timestamp.isoformat(),
            }
        )

    @app.route("/api/kiosk/check-out", methods=["POST"], endpoint="api_kiosk_check_out")
    def api_kiosk_check_out():
        data = json_body()
        if data.get("student_id") in (None, ""):
            raise ValidationError("student_id is required")
        session = container.lifecycle_service.check_out(int(data["student_id"]))
        return jsonify({"success": True, "check_in": to_jsonable(session)})

    @app.route("/api/kiosk/recent", methods=["GET"], endpoint="api_kiosk_recent")
    def api_kiosk_recent():
        rows = container.ledger.recent_checkins(container.clock().date(), limit=options.kiosk_recent_limit)
        settings = container.settings_store.current
        return jsonify(
            {
                "kiosk_mode_enabled": settings.kiosk_mode_enabled,
                "welcome_message": settings.welcome_message,
                "refresh_seconds": options.kiosk_refresh_seconds,
                "check_ins": to_jsonable(sorted(rows, key=lambda r: r.created_at, reverse=True)),
            }
        )

    @app.route("/api/check-in/settings", methods=["GET"], endpoint="api_checkin_settings")
    def api_checkin_settings():
        return jsonify({"settings": to_jsonable(container.settings_store.current)})

    @app.route("/api/check-in/settings", methods=["PATCH"], endpoint="api_checkin_settings_update")
    def api_checkin_settings_update():
        saved = container.settings_store.update(**json_body())
        return jsonify({"success": True, "settings": to_jsonable(saved)})

    @app.route("/api/check-in/auto-checkout", methods=["POST"], endpoint="api_checkin_auto_checkout")
    def api_checkin_auto_checkout():
        closed = container.lifecycle_service.sweep_auto_checkout()
        return jsonify({"success": True, "closed": closed})
