"""Request/response logging interceptor.

Observes each request/response pair from ``before_request``/``after_request``
hooks. It never rewrites the response body. Bodies are only logged when
``log_request_bodies`` is on, and credential fields are always redacted.
"""
from __future__ import annotations
import json
import logging
import time
from typing import Any

from flask import Flask, Response, g, request

logger = logging.getLogger("admin_api.requests")

REDACTED = "***"
SENSITIVE_KEYS = frozenset({"password", "new_password", "secret", "token", "authorization"})
MAX_LOGGED_BODY = 4096


def redact(value: Any) -> Any:
    """Return a copy of ``value`` with credential fields masked."""
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


def _dump(body: Any) -> str:
    text = json.dumps(redact(body), ensure_ascii=False, default=str)
    if len(text) > MAX_LOGGED_BODY:
        return text[:MAX_LOGGED_BODY] + "...(truncated)"
    return text


def register_request_logging(app: Flask, log_bodies: bool = False) -> None:
    """Attach the logging interceptor to ``app``."""

    @app.before_request
    def _log_request() -> None:
        g.request_started = time.perf_counter()
        logger.info("[Request] %s %s", request.method, request.full_path.rstrip("?"))
        if log_bodies and request.is_json:
            body = request.get_json(silent=True)
            if body:
                logger.info("[Request Body] %s", _dump(body))

    @app.after_request
    def _log_response(response: Response) -> Response:
        started = g.get("request_started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        logger.info(
            "[Response] %s %s %s (%.1f ms)",
            response.status_code, request.method, request.path, elapsed_ms,
        )
        if log_bodies and response.is_json:
            logger.info("[Response Body] %s", _dump(response.get_json(silent=True)))

        correlation_id = request.headers.get("X-Correlation-Id")
        if correlation_id:
            response.headers["X-Correlation-Id"] = correlation_id
        return response
