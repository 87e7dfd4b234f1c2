"""Audit logging for admin operations on Clerk users."""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
import os
from pathlib import Path
from typing import Any, Literal

logger = logging.getLogger(__name__)

DEMO_SIGNING_KEY = "demo-audit-signing-key-change-in-production"

EventType = Literal[
    "user_create", "user_delete", "user_update", "user_metadata_update",
    "user_password_set", "user_block", "user_unblock", "user_verify_email",
    "user_reset_password", "login",
]


def audit_log_file() -> Path:
    """Resolve the JSONL audit file (AUDIT_LOG_DIR is read on every call)."""
    return Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit")) / "admin-events.jsonl"


def _get_signing_key() -> bytes:
    """Get the audit signing key from the environment or /run/secrets."""
    key = os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip()
    if key:
        return key.encode("utf-8")
    secret_file = Path("/run/secrets") / "audit_log_signing_key"
    if secret_file.is_file():
        try:
            return secret_file.read_text(encoding="utf-8").strip().encode("utf-8")
        except OSError:
            pass
    if os.environ.get("DEMO_MODE", "false").lower() == "true":
        return DEMO_SIGNING_KEY.encode("utf-8")
    return b""


def _sign_event(event: dict[str, Any]) -> str:
    """Generate HMAC-SHA256 signature for audit event."""
    signing_key = _get_signing_key()
    if not signing_key:
        return ""
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(signing_key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def log_admin_event(
    event_type: EventType,
    user_id: str,
    *,
    operator: str = "admin-api",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append an admin event to the audit trail with timestamp and signature.

    Args:
        event_type: Operation performed
        user_id: Clerk id of the affected user (empty when a login resolved no user)
        operator: Who performed the operation
        details: Additional context; never credentials
        success: Whether the operation succeeded
    """
    path = audit_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "user_id": user_id,
        "operator": operator,
        "success": success,
        "details": details or {},
    }

    signature = _sign_event(event)
    if signature:
        event["signature"] = signature

    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")

    path.chmod(0o600)


def safe_log_admin_event(
    event_type: EventType,
    user_id: str,
    *,
    operator: str = "admin-api",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> bool:
    """Log an admin event, never raising.

    Audit failures must not break the admin operation that triggered them.

    Returns:
        True if event was logged successfully, False if logging failed
    """
    try:
        log_admin_event(event_type, user_id, operator=operator, details=details, success=success)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Failed to log %s audit event for %s: %s", event_type, user_id, e)
        return False


def verify_audit_log() -> tuple[int, int]:
    """Verify all signatures in the audit log.

    Returns:
        Tuple of (total_events, valid_signatures)
    """
    path = audit_log_file()
    if not path.exists():
        return 0, 0

    total = 0
    valid = 0

    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                event = json.loads(line)
                stored_sig = event.pop("signature", "")
                if not stored_sig:
                    continue
                computed_sig = _sign_event(event)
                if hmac.compare_digest(stored_sig, computed_sig):
                    valid += 1
            except (json.JSONDecodeError, KeyError):
                continue

    return total, valid


if __name__ == "__main__":
    import sys
    total, valid = verify_audit_log()
    print(f"Audit log: {valid}/{total} events with valid signatures")
    sys.exit(0 if total == valid else 1)
