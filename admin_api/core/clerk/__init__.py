"""Clerk Backend API client library.

This package provides a small, testable interface to the Clerk Backend API
user-management endpoints.

Architecture:
- client.py: HTTP client with secret-key authentication and error translation
- models.py: UserRecord read-only projection of a Clerk user
- users.py: User operations (create, list, update, ban, verify password, ...)
- exceptions.py: Typed exceptions for error handling

Usage:
    from admin_api.core.clerk import ClerkClient, UserService

    client = ClerkClient(secret_key="sk_live_...")
    users = UserService(client)
    page = users.get_user_list(limit=100, offset=0)
"""
from .client import ClerkClient, DEFAULT_API_URL, REQUEST_TIMEOUT
from .exceptions import ClerkError, ClerkAPIError, UserNotFoundError
from .models import UserRecord
from .users import UserService

__all__ = [
    "ClerkClient",
    "DEFAULT_API_URL",
    "REQUEST_TIMEOUT",
    "ClerkError",
    "ClerkAPIError",
    "UserNotFoundError",
    "UserRecord",
    "UserService",
]
