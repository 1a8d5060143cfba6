from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_limiter.errors import RateLimitExceeded

from ..core.exceptions import PIN_LOCKED_MESSAGE, CheckInRejected, NotFoundError, RemoteWriteError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_arg(name: str, default: Optional[date] = None) -> Optional[date]:
    raw = (request.args.get(name) or "").strip()
    return parse_iso_date(raw) if raw else default


def int_arg(name: str) -> Optional[int]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def error_response(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def register_error_handlers(app: Flask) -> None:
    """Map domain errors to JSON responses for every endpoint."""

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return error_response(str(e), 400)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return error_response(str(e), 404)

    @app.errorhandler(RateLimitExceeded)
    def _rate_limited(e: RateLimitExceeded):
        logger.warning("rate limit hit on %s from %s: %s", request.path, request.remote_addr, e.description)
        return error_response(PIN_LOCKED_MESSAGE, 429)

    @app.errorhandler(CheckInRejected)
    def _rejected(e: CheckInRejected):
        return error_response(e.user_message, 422)

    @app.errorhandler(RemoteWriteError)
    def _remote(e: RemoteWriteError):
        logger.error("request failed against the store: %s", e)
        return error_response("The attendance store is unavailable, please retry", 503)
