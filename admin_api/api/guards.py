"""
Request guards for the admin blueprints.

Static bearer token authentication for the admin facade. When ADMIN_API_TOKEN
is configured, every admin route requires ``Authorization: Bearer <token>``.
When it is empty the guard is a no-op (local demo setups).

Security:
- Constant-time comparison (hmac.compare_digest)
- Tokens are never logged; only a truncated SHA-256 hash is
"""

import hashlib
import hmac
import logging

from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)


def _unauthorized(message: str):
    response = jsonify({"success": False, "error": message})
    response.status_code = 401
    response.headers["WWW-Authenticate"] = 'Bearer realm="admin-api"'
    return response


def _log_auth_attempt(token: str, success: bool) -> None:
    """Log authentication attempt without leaking the token."""
    token_hash = hashlib.sha256(token.encode()).hexdigest()[:12] if token else "none"
    correlation_id = request.headers.get("X-Correlation-Id", "none")
    client_ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    status = "SUCCESS" if success else "FAILED"
    logger.info(
        f"{status} admin auth | token_hash={token_hash} | path={request.path} | "
        f"correlation_id={correlation_id} | client_ip={client_ip}"
    )


def check_admin_token():
    """Validate the static admin token for the current request.

    Returns:
        None when the request may proceed, otherwise a 401 response
    """
    cfg = current_app.config.get("APP_CONFIG")
    expected = getattr(cfg, "admin_api_token", "") if cfg else ""
    if not expected:
        g.auth_method = "none"
        return None

    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        return _unauthorized("Authorization header missing. Provide 'Authorization: Bearer <token>'.")
    if not auth_header.startswith("Bearer "):
        return _unauthorized("Authorization header must use Bearer token scheme.")

    token = auth_header[7:].strip()
    if not token or not hmac.compare_digest(token.encode(), expected.encode()):
        _log_auth_attempt(token, success=False)
        return _unauthorized("Invalid admin token.")

    _log_auth_attempt(token, success=True)
    g.auth_method = "static"
    return None

