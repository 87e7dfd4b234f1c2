"""Clerk-specific exceptions for error handling."""
from __future__ import annotations
from typing import Optional


class ClerkError(Exception):
    """Base exception for all Clerk operations."""
    pass


class ClerkAPIError(ClerkError):
    """HTTP error from the Clerk Backend API.

    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
        code: Clerk error code (e.g. ``form_identifier_exists``), when present
    """

    def __init__(self, status_code: int, message: str, endpoint: str, code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        self.code = code
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class UserNotFoundError(ClerkError):
    """User lookup failed - id does not exist."""
    pass
