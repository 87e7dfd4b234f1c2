"""Error handlers for the application.

Every error answers JSON: ``{"success": false, "error": "..."}``. A ``debug``
field is only added to 5xx answers, and only when DEMO_MODE or Flask debug
is on.
"""
from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from admin_api.core.errors import AdminApiError


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(AdminApiError)
    def handle_admin_error(error: AdminApiError):
        """Handle the service-layer error taxonomy."""
        body = error.to_dict()
        if error.status < 500:
            return jsonify(body), error.status

        app.logger.error("%s %s failed: %s", request.method, request.path, error.detail)
        if show_debug():
            # 4xx details are already in "error"
            body["debug"] = {"kind": error.kind, "detail": error.detail}
            offset = getattr(error, "offset", None)
            if offset is not None:
                body["debug"]["offset"] = offset
        else:
            body["error"] = "Identity provider request failed"
        return jsonify(body), error.status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        """Handle 400/401/404/405/413 raised by Flask or abort()."""
        message = error.description or error.name
        if error.code == 400 and request.is_json and request.get_json(silent=True) is None:
            message = "Malformed JSON body"
        return jsonify({"success": False, "error": message}), error.code

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # ALWAYS log the error (even in production) - logs are secure
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)

        body = {"success": False, "error": "Internal Server Error"}
        if show_debug():
            body["debug"] = {"kind": type(error).__name__, "detail": str(error)}
        return jsonify(body), 500


def show_debug() -> bool:
    """Expose internals only in debug/demo mode, never in production."""
    cfg = current_app.config.get("APP_CONFIG")
    return bool(current_app.debug or (cfg is not None and cfg.demo_mode))
