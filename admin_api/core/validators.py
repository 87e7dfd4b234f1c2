"""Input validation helpers for admin request payloads.

Every helper raises ``ValidationError`` (HTTP 400) so a bad request never
reaches Clerk.
"""
from __future__ import annotations
from typing import Any, Optional

from admin_api.core.errors import ValidationError

EMAIL_MAX_LENGTH = 254
NAME_MAX_LENGTH = 128
PASSWORD_MAX_LENGTH = 72


def require_field(payload: dict, field: str) -> Any:
    """Return ``payload[field]``, rejecting missing and empty values."""
    value = payload.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing required field: {field}")
    return value


def validate_email(email: Any) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Trimmed email address (case is left to Clerk)

    Raises:
        ValidationError: If email is invalid
    """
    if not isinstance(email, str):
        raise ValidationError("Invalid email format")
    email = email.strip()
    if not email or "@" not in email:
        raise ValidationError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain or any(c.isspace() for c in email):
        raise ValidationError("Invalid email format")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError("Email exceeds maximum length")

    return email


def validate_name(name: Any, field: str) -> str:
    """Validate first/last name fields.

    Args:
        name: Name to validate
        field: Field name for error messages (e.g., "firstName")

    Returns:
        Trimmed name
    """
    if not isinstance(name, str):
        raise ValidationError(f"{field} must be a string")
    name = name.strip()
    if not name:
        raise ValidationError(f"{field} must not be empty")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"{field} exceeds maximum length")

    if any(char in name for char in "<>\"'`;&|$"):
        raise ValidationError(f"{field} contains invalid characters")

    return name


def validate_password(password: Any) -> str:
    """Local shape check only; Clerk enforces the actual password policy."""
    if not isinstance(password, str) or not password:
        raise ValidationError("Missing required field: password")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(f"password must not exceed {PASSWORD_MAX_LENGTH} characters")
    return password


def validate_metadata(value: Any, field: str) -> dict:
    if not isinstance(value, dict):
        raise ValidationError(f"{field} must be a JSON object")
    return value


def parse_pagination(
    limit: Optional[str],
    offset: Optional[str],
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """Parse ``limit``/``offset`` query values.

    Unparseable values fall back to the defaults; ``limit`` is clamped to
    ``[1, max_limit]`` and ``offset`` to ``>= 0``.
    """
    try:
        parsed_limit = int(limit) if limit not in (None, "") else default_limit
    except (TypeError, ValueError):
        parsed_limit = default_limit
    try:
        parsed_offset = int(offset) if offset not in (None, "") else 0
    except (TypeError, ValueError):
        parsed_offset = 0

    if parsed_limit < 1:
        parsed_limit = default_limit
    return min(parsed_limit, max_limit), max(parsed_offset, 0)
