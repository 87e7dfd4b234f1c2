"""Clerk user management operations."""
from __future__ import annotations
import logging
from typing import Any, Optional

from .client import ClerkClient
from .exceptions import ClerkAPIError, ClerkError, UserNotFoundError
from .models import UserRecord

logger = logging.getLogger(__name__)

# Clerk answers a wrong password on verify_password with 422 and this code.
INCORRECT_PASSWORD_CODES = frozenset({"incorrect_password", "form_password_incorrect"})


class UserService:
    """Service for managing Clerk users."""

    def __init__(self, client: ClerkClient):
        """Initialize user service.

        Args:
            client: Configured Clerk client
        """
        self.client = client

    def create_user(
        self,
        email_addresses: list[str],
        password: str,
        profile_fields: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> dict:
        """Create a new user.

        Args:
            email_addresses: Email addresses, the first one becomes primary
            password: Initial password (validated by Clerk's password policy)
            profile_fields: Clerk user fields (first_name, last_name, username, phone_number)
            metadata: public_metadata / private_metadata / unsafe_metadata objects

        Returns:
            Created Clerk user representation
        """
        payload: dict[str, Any] = {"email_address": list(email_addresses), "password": password}
        payload.update(profile_fields or {})
        payload.update(metadata or {})
        resp = self.client.post("/users", json=payload)
        user = resp.json()
        logger.info("Created Clerk user %s", user.get("id"))
        return user

    def delete_user(self, user_id: str) -> dict:
        """Delete a user.

        Raises:
            UserNotFoundError: If the id is unknown
        """
        try:
            resp = self.client.delete(f"/users/{user_id}")
        except ClerkAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found") from exc
            raise
        logger.info("Deleted Clerk user %s", user_id)
        return resp.json() if resp.content else {"id": user_id, "deleted": True}

    def get_user(self, user_id: str) -> dict:
        """Return the Clerk user representation for an id.

        Raises:
            UserNotFoundError: If the id is unknown
        """
        try:
            return self.client.get(f"/users/{user_id}").json()
        except ClerkAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found") from exc
            raise

    def get_user_list(self, limit: int, offset: int = 0) -> list[UserRecord]:
        """Return one page of users, newest first.

        A page shorter than ``limit`` (or empty) means the listing is exhausted.
        """
        resp = self.client.get(
            "/users",
            params={"limit": limit, "offset": offset, "order_by": "-created_at"},
        )
        body = resp.json()
        # Some API versions wrap the list as {"data": [...], "total_count": n}
        if isinstance(body, dict):
            body = body.get("data") or []
        if not isinstance(body, list):
            raise ClerkError(f"Unexpected user list body at offset {offset}")
        records = []
        for index, item in enumerate(body):
            try:
                records.append(UserRecord.from_api(item))
            except (KeyError, TypeError, AttributeError) as exc:
                raise ClerkError(f"Malformed user at offset {offset + index}: {exc!r}") from exc
        return records

    def update_user(self, user_id: str, fields: dict[str, Any]) -> dict:
        """Partially update a user; fields not supplied are left unchanged."""
        try:
            return self.client.patch(f"/users/{user_id}", json=fields).json()
        except ClerkAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found") from exc
            raise

    def update_user_metadata(self, user_id: str, metadata: dict[str, Any]) -> dict:
        """Deep-merge public/private/unsafe metadata into the user."""
        try:
            return self.client.patch(f"/users/{user_id}/metadata", json=metadata).json()
        except ClerkAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found") from exc
            raise

    def ban_user(self, user_id: str) -> dict:
        """Mark the user as banned; Clerk revokes their sessions."""
        return self._user_action(user_id, "ban")

    def unban_user(self, user_id: str) -> dict:
        return self._user_action(user_id, "unban")

    def add_email_address(self, user_id: str, email: str, primary: bool = True) -> dict:
        """Attach a pre-verified email address to the user."""
        resp = self.client.post(
            "/email_addresses",
            json={"user_id": user_id, "email_address": email, "verified": True, "primary": primary},
        )
        return resp.json()

    def add_phone_number(self, user_id: str, phone_number: str, primary: bool = True) -> dict:
        resp = self.client.post(
            "/phone_numbers",
            json={"user_id": user_id, "phone_number": phone_number, "verified": True, "primary": primary},
        )
        return resp.json()

    def mark_email_verified(self, user_id: str) -> dict:
        """Mark the user's primary email address as verified.

        Returns:
            The refreshed user representation
        """
        record = UserRecord.from_api(self.get_user(user_id))
        email_id = record.primary_email_address_id
        if not email_id:
            raise ClerkAPIError(422, f"User '{user_id}' has no email address", f"/users/{user_id}")
        self.client.patch(f"/email_addresses/{email_id}", json={"verified": True})
        return self.get_user(user_id)

    def verify_password(self, user_id: str, password: str) -> dict:
        """Check a plaintext password against the user's stored credential.

        Returns:
            ``{"verified": bool}``. A rejected password is ``verified: False``;
            transport problems and other API errors raise instead.
        """
        try:
            resp = self.client.post(f"/users/{user_id}/verify_password", json={"password": password})
        except ClerkAPIError as exc:
            if exc.status_code in (400, 422) and exc.code in INCORRECT_PASSWORD_CODES:
                return {"verified": False}
            raise
        return {"verified": bool(resp.json().get("verified", False))}

    def send_password_reset_email(self, user_id: str) -> dict:
        resp = self.client.post(f"/users/{user_id}/password_reset")
        logger.info("Password reset email requested for Clerk user %s", user_id)
        return resp.json() if resp.content else {"id": user_id}

    def _user_action(self, user_id: str, action: str) -> dict:
        try:
            return self.client.post(f"/users/{user_id}/{action}").json()
        except ClerkAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found") from exc
            raise
