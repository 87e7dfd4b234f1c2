"""Low-level HTTP client for the Clerk Backend API.

Handles authentication headers, timeouts and error translation.
"""
from __future__ import annotations
import os
from typing import Optional, Dict, Any

import requests

from .exceptions import ClerkAPIError

DEFAULT_API_URL = "https://api.clerk.com/v1"
REQUEST_TIMEOUT = 10


class ClerkClient:
    """HTTP client for the Clerk Backend API.

    Clerk authenticates backend calls with the instance secret key sent as a
    bearer token; there is no token exchange or refresh.

    One instance is shared by every request handler. It holds no
    request-scoped state, so sharing is safe as long as ``requests`` is.

    Usage:
        client = ClerkClient(secret_key="sk_live_...")
        response = client.get("/users", params={"limit": 10})
    """

    def __init__(self, base_url: Optional[str] = None, secret_key: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        """Initialize Clerk client.

        Args:
            base_url: Clerk API base URL (defaults to CLERK_API_URL env var)
            secret_key: Instance secret key (defaults to CLERK_SECRET_KEY env var)
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or os.environ.get("CLERK_API_URL", DEFAULT_API_URL)).rstrip("/")
        self._secret_key = secret_key or os.environ.get("CLERK_SECRET_KEY", "")
        self.timeout = timeout

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        if not self._secret_key:
            raise ClerkAPIError(401, "Clerk secret key is not configured", self.base_url)
        headers = dict(extra or {})
        headers["Authorization"] = f"Bearer {self._secret_key}"
        headers.setdefault("Accept", "application/json")
        return headers

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> requests.Response:
        """Execute GET request.

        Args:
            path: API endpoint path (e.g., "/users")
            params: Query parameters
            **kwargs: Additional arguments for requests.get

        Returns:
            Response object

        Raises:
            ClerkAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.get(f"{self.base_url}{path}", params=params, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def post(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> requests.Response:
        """Execute POST request.

        Raises:
            ClerkAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.post(f"{self.base_url}{path}", json=json, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> requests.Response:
        """Execute PATCH request.

        Raises:
            ClerkAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.patch(f"{self.base_url}{path}", json=json, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def delete(self, path: str, **kwargs) -> requests.Response:
        """Execute DELETE request.

        Raises:
            ClerkAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.delete(f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Clerk error bodies look like
        ``{"errors": [{"message": ..., "long_message": ..., "code": ...}]}``.

        Raises:
            ClerkAPIError: If response status indicates error
        """
        if resp.status_code < 400:
            return

        message = resp.text
        code = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("errors"):
            first = body["errors"][0] or {}
            message = first.get("long_message") or first.get("message") or message
            code = first.get("code")
        raise ClerkAPIError(resp.status_code, message, resp.url, code)
