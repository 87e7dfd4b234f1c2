"""
User Administration Service Layer

One method per admin route. Each validates the few fields it needs, maps
them onto Clerk's field names, forwards the call and relays Clerk's
representation. Provider errors are translated into the admin error
taxonomy here so handlers never see ``requests`` or Clerk exceptions.

Architecture:
    /user/* and /auth/* routes ──> user_admin.py ──> admin_api.core.clerk ──> Clerk

Mutating operations are written to the audit trail.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import requests

from admin_api.core import audit
from admin_api.core.clerk import ClerkAPIError, ClerkError, UserNotFoundError, UserRecord, UserService
from admin_api.core.directory_scanner import DirectoryScanner
from admin_api.core.errors import (
    NotFoundError,
    OperationTimeout,
    UpstreamFailure,
    ValidationError,
)
from admin_api.core.validators import (
    parse_pagination,
    require_field,
    validate_email,
    validate_metadata,
    validate_name,
    validate_password,
)

logger = logging.getLogger(__name__)

# Request field -> Clerk metadata field
METADATA_FIELDS = {
    "publicMetadata": "public_metadata",
    "privateMetadata": "private_metadata",
    "unsafeMetadata": "unsafe_metadata",
}

# Request field -> Clerk profile field
PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "username": "username",
}


@contextmanager
def provider_call(action: str, user_id: Optional[str] = None) -> Iterator[None]:
    """Translate Clerk and transport errors raised inside the block.

    No retries: a single provider failure is surfaced as-is.
    """
    try:
        yield
    except UserNotFoundError as exc:
        raise NotFoundError(str(exc)) from exc
    except ClerkAPIError as exc:
        logger.warning("Clerk rejected %s (user=%s): %s", action, user_id, exc)
        if exc.status_code == 404:
            raise NotFoundError(f"User '{user_id}' not found" if user_id else exc.message) from exc
        if exc.status_code in (400, 422):
            raise ValidationError(exc.message) from exc
        raise UpstreamFailure(f"Failed to {action}: {exc.message}") from exc
    except requests.Timeout as exc:
        logger.error("Clerk timed out during %s (user=%s)", action, user_id)
        raise OperationTimeout(f"Identity provider timed out while trying to {action}") from exc
    except (ClerkError, requests.RequestException) as exc:
        logger.error("Clerk call failed during %s (user=%s): %s", action, user_id, exc)
        raise UpstreamFailure(f"Failed to {action}: {exc}") from exc


def _require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _profile_fields(payload: dict) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for source, target in PROFILE_FIELDS.items():
        if payload.get(source):
            value = payload[source]
            fields[target] = value if source == "username" else validate_name(value, source)
    return fields


def _metadata_fields(payload: dict) -> dict[str, Any]:
    return {
        target: validate_metadata(payload[source], source)
        for source, target in METADATA_FIELDS.items()
        if payload.get(source) is not None
    }


class UserAdminService:
    """Admin operations on Clerk users."""

    def __init__(
        self,
        users: UserService,
        scanner: DirectoryScanner,
        list_default_limit: int = 50,
        max_page_size: int = 500,
    ):
        self.users = users
        self.scanner = scanner
        self.list_default_limit = list_default_limit
        self.max_page_size = max_page_size

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────

    def create_user(self, payload: Any) -> dict:
        """Create a user from ``{email, password, firstName, lastName, ...}``."""
        payload = _require_object(payload)
        email = validate_email(require_field(payload, "email"))
        password = validate_password(require_field(payload, "password"))
        profile = _profile_fields(payload)
        if payload.get("phoneNumber"):
            profile["phone_number"] = [str(payload["phoneNumber"]).strip()]
        metadata = _metadata_fields(payload)

        with provider_call("create user"):
            user = self.users.create_user([email], password, profile, metadata or None)

        audit.safe_log_admin_event("user_create", user.get("id", ""), details={"email": email})
        return user

    def delete_user(self, user_id: str) -> dict:
        with provider_call("delete user", user_id):
            self.users.delete_user(user_id)
        audit.safe_log_admin_event("user_delete", user_id)
        return {"success": True}

    def list_users(self, limit: Optional[str] = None, offset: Optional[str] = None) -> list[dict]:
        """One page of users; ``limit`` is clamped to the provider's cap."""
        page_limit, page_offset = parse_pagination(limit, offset, self.list_default_limit, self.max_page_size)
        with provider_call("list users"):
            page = self.users.get_user_list(page_limit, page_offset)
        return [record.raw for record in page]

    def get_user(self, user_id: str) -> dict:
        with provider_call("get user", user_id):
            return self.users.get_user(user_id)

    # ─────────────────────────────────────────────────────────────────────
    # Updates
    # ─────────────────────────────────────────────────────────────────────

    def update_profile(self, user_id: str, payload: Any) -> dict:
        """Partial profile update; fields not supplied are left unchanged.

        ``email`` and ``phoneNumber`` are separate Clerk resources, so they
        are attached as new primary identifiers before the user is updated.
        """
        payload = _require_object(payload)
        fields = _profile_fields(payload)
        email = validate_email(payload["email"]) if payload.get("email") else None
        phone = str(payload["phoneNumber"]).strip() if payload.get("phoneNumber") else None
        if not fields and not email and not phone:
            raise ValidationError("No updatable fields supplied")

        with provider_call("update user", user_id):
            if email:
                self.users.add_email_address(user_id, email, primary=True)
            if phone:
                self.users.add_phone_number(user_id, phone, primary=True)
            user = self.users.update_user(user_id, fields) if fields else self.users.get_user(user_id)

        changed = sorted(list(fields) + (["email"] if email else []) + (["phone_number"] if phone else []))
        audit.safe_log_admin_event("user_update", user_id, details={"fields": changed})
        return user

    def update_metadata(self, user_id: str, payload: Any) -> dict:
        payload = _require_object(payload)
        metadata = _metadata_fields(payload)
        if not metadata:
            raise ValidationError("Provide at least one of publicMetadata, privateMetadata, unsafeMetadata")

        with provider_call("update metadata", user_id):
            user = self.users.update_user_metadata(user_id, metadata)

        audit.safe_log_admin_event("user_metadata_update", user_id, details={"fields": sorted(metadata)})
        return user

    def set_password(self, user_id: str, payload: Any) -> dict:
        payload = _require_object(payload)
        password = validate_password(require_field(payload, "password"))
        with provider_call("set password", user_id):
            user = self.users.update_user(user_id, {"password": password})
        audit.safe_log_admin_event("user_password_set", user_id)
        return user

    # ─────────────────────────────────────────────────────────────────────
    # Directory lookups
    # ─────────────────────────────────────────────────────────────────────

    def search_by_email(self, fragment: Optional[str]) -> tuple[list[dict], bool]:
        """Substring search across the directory.

        Best effort: if a page request fails mid-scan, whatever was found so
        far is returned and the second element is True.
        """
        if not fragment or not fragment.strip():
            raise ValidationError("Missing email query param")
        result = self.scanner.search_by_email(fragment)
        if result.failure is not None and result.pages_requested == 0:
            # Nothing was reachable at all; there is no partial answer to give.
            raise result.failure
        return [record.raw for record in result.matches], result.partial

    def lookup_by_email(self, email: Optional[str]) -> dict:
        """Exact, case-insensitive lookup. Failures are surfaced, never guessed."""
        if not email or not email.strip():
            raise ValidationError("Missing email")
        result = self.scanner.find_by_email(email)
        record: Optional[UserRecord] = result.first
        if record is None:
            raise NotFoundError(f"No user with email '{email.strip()}'")
        return record.raw

    # ─────────────────────────────────────────────────────────────────────
    # Account state
    # ─────────────────────────────────────────────────────────────────────

    def block(self, user_id: str) -> dict:
        with provider_call("block user", user_id):
            user = self.users.ban_user(user_id)
        audit.safe_log_admin_event("user_block", user_id)
        return {"success": True, "user": user}

    def unblock(self, user_id: str) -> dict:
        with provider_call("unblock user", user_id):
            user = self.users.unban_user(user_id)
        audit.safe_log_admin_event("user_unblock", user_id)
        return {"success": True, "user": user}

    def verify_email(self, user_id: str) -> dict:
        with provider_call("verify email", user_id):
            user = self.users.mark_email_verified(user_id)
        audit.safe_log_admin_event("user_verify_email", user_id)
        return {"success": True, "user": user}

    def reset_password(self, user_id: str) -> dict:
        with provider_call("send password reset email", user_id):
            self.users.send_password_reset_email(user_id)
        audit.safe_log_admin_event("user_reset_password", user_id)
        return {"success": True}
