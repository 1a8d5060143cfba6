from __future__ import annotations

from flask import Flask, g
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Set on the request when a PIN matched no single active student.
_IDENTITY_FAILED = "pin_identity_failed"


def create_limiter(app: Flask) -> Limiter:
    """Per-app limiter keyed on the client address; only decorated routes are limited."""
    return Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[],
        storage_uri=app.config.get("RATELIMIT_STORAGE_URI", "memory://"),
    )


def pin_failure_limit(max_failures: int, window_seconds: int) -> str:
    return f"{int(max_failures)} per {int(window_seconds)} seconds"


def record_identity_failure() -> None:
    setattr(g, _IDENTITY_FAILED, True)


def identity_failed(response) -> bool:
    return bool(g.get(_IDENTITY_FAILED, False))
