"""Login endpoint (/auth/login).

Confirms an email/password pair against Clerk. No session, cookie or token
is issued.
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from admin_api.api.errors import show_debug
from admin_api.api.guards import check_admin_token
from admin_api.core import audit
from admin_api.core.authentication import CredentialGate, LoginResult

bp = Blueprint("auth", __name__, url_prefix="/auth")

bp.before_request(check_admin_token)


def _gate() -> CredentialGate:
    return current_app.extensions["credential_gate"]


@bp.route("/login", methods=["POST"])
def login():
    """Verify {email, password}.

    Responses:
        200 {success: true, userId, user}
        400 missing fields, unknown user, password auth disabled
        401 wrong password or blocked account
        408 verification timed out
        500 identity provider failure
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}

    outcome = _gate().authenticate(payload.get("email"), payload.get("password"))

    if outcome.result is not LoginResult.VALIDATION_ERROR:
        audit.safe_log_admin_event(
            "login",
            outcome.user_id or "",
            details={"result": outcome.result.value},
            success=outcome.ok,
        )

    body = outcome.to_dict()
    if outcome.detail and show_debug():
        body["debug"] = {"detail": outcome.detail}
    return jsonify(body), outcome.http_status
