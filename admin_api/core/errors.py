"""Error taxonomy shared by the service layer and the HTTP handlers."""
from __future__ import annotations
from typing import Optional


class AdminApiError(Exception):
    """Admin API error with HTTP status and a human-readable detail."""

    status = 500
    kind = "internal_error"

    def __init__(self, detail: str, status: Optional[int] = None):
        self.detail = detail
        if status is not None:
            self.status = status
        super().__init__(detail)

    def to_dict(self) -> dict:
        """Convert to the JSON error envelope."""
        return {"success": False, "error": self.detail}


class ValidationError(AdminApiError):
    """Missing or malformed input, rejected before any provider call."""

    status = 400
    kind = "validation_error"


class AuthenticationError(AdminApiError):
    """Credential or account-state rejection."""

    status = 401
    kind = "authentication_error"


class NotFoundError(AdminApiError):
    """Target entity absent."""

    status = 404
    kind = "not_found"


class OperationTimeout(AdminApiError):
    """A bounded operation exceeded its budget."""

    status = 408
    kind = "timeout"


class UpstreamFailure(AdminApiError):
    """Provider call failed or the provider was unreachable.

    Attributes:
        offset: Page offset at which a directory scan failed, if any
    """

    status = 500
    kind = "upstream_failure"

    def __init__(self, detail: str, status: Optional[int] = None, offset: Optional[int] = None):
        super().__init__(detail, status)
        self.offset = offset
