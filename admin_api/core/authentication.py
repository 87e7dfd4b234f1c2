"""Credential verification for the admin login endpoint.

Login resolves the user by email with the directory scanner, rejects banned
accounts and accounts without password authentication, then asks Clerk to
verify the password. Nothing is minted: a successful login only confirms
that the submitted password is correct.

    Start → Validating → Searching → Blocked | PasswordUnavailable | NotFound | UpstreamFailure
                                   → Found → Verifying → Success | InvalidCredential | Timeout | UpstreamFailure

No state is retried; one pass per request.
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from admin_api.core.clerk import UserRecord, UserService
from admin_api.core.directory_scanner import DirectoryScanner, StopReason
from admin_api.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_TIMEOUT = 5.0
DEFAULT_SEARCH_BUDGET = 10.0
DEFAULT_VERIFY_WORKERS = 8


class LoginResult(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    SEARCH_TIMEOUT = "search_timeout"
    ACCOUNT_BLOCKED = "account_blocked"
    PASSWORD_AUTH_UNAVAILABLE = "password_auth_unavailable"
    INVALID_CREDENTIAL = "invalid_credential"
    TIMEOUT = "timeout"
    UPSTREAM_FAILURE = "upstream_failure"


_HTTP_STATUS = {
    LoginResult.SUCCESS: 200,
    LoginResult.VALIDATION_ERROR: 400,
    LoginResult.NOT_FOUND: 400,
    LoginResult.PASSWORD_AUTH_UNAVAILABLE: 400,
    LoginResult.INVALID_CREDENTIAL: 401,
    LoginResult.ACCOUNT_BLOCKED: 401,
    LoginResult.TIMEOUT: 408,
    LoginResult.SEARCH_TIMEOUT: 408,
    LoginResult.UPSTREAM_FAILURE: 500,
}

_MESSAGES = {
    LoginResult.VALIDATION_ERROR: "Email and password are required",
    LoginResult.NOT_FOUND: "User not found",
    LoginResult.SEARCH_TIMEOUT: "User search timed out",
    LoginResult.ACCOUNT_BLOCKED: "Account is blocked",
    LoginResult.PASSWORD_AUTH_UNAVAILABLE: "Password authentication is not enabled for this user",
    LoginResult.INVALID_CREDENTIAL: "Invalid password",
    LoginResult.TIMEOUT: "Password verification timed out",
    LoginResult.UPSTREAM_FAILURE: "Identity provider request failed",
}


@dataclass(frozen=True)
class LoginOutcome:
    """Result of one login attempt. Never persisted."""

    result: LoginResult
    user_id: Optional[str] = None
    user: Optional[dict[str, Any]] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is LoginResult.SUCCESS

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self.result]

    @property
    def message(self) -> str:
        return _MESSAGES.get(self.result, "")

    def to_dict(self) -> dict[str, Any]:
        """JSON body for the login endpoint (``detail`` is left to the caller)."""
        if self.ok:
            return {"success": True, "userId": self.user_id, "user": self.user}
        return {"success": False, "error": self.message, "reason": self.result.value}


class CredentialGate:
    """Time-boxed login against Clerk.

    The user search and the password check have separate budgets, each
    measured from its own start. A verification call that outlives its budget
    keeps running on the shared executor and its eventual result is discarded.
    A call still waiting for a free worker when the budget runs out is
    cancelled, so the password is never sent late.
    """

    def __init__(
        self,
        user_service: UserService,
        scanner: DirectoryScanner,
        verify_timeout: float = DEFAULT_VERIFY_TIMEOUT,
        search_budget: Optional[float] = DEFAULT_SEARCH_BUDGET,
        distinguish_search_timeout: bool = False,
        max_workers: int = DEFAULT_VERIFY_WORKERS,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.user_service = user_service
        self.scanner = scanner
        self.verify_timeout = verify_timeout
        self.search_budget = search_budget
        self.distinguish_search_timeout = distinguish_search_timeout
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="verify-password"
        )

    def authenticate(self, email: Any, password: Any) -> LoginOutcome:
        """Run the login state machine for one request."""
        if not isinstance(email, str) or not isinstance(password, str):
            return LoginOutcome(LoginResult.VALIDATION_ERROR)
        email = email.strip()
        if not email or not password:
            return LoginOutcome(LoginResult.VALIDATION_ERROR)

        try:
            scan = self.scanner.find_by_email(email, max_elapsed=self.search_budget)
        except UpstreamFailure as exc:
            logger.error("Login search failed for %s: %s", _mask(email), exc.detail)
            return LoginOutcome(LoginResult.UPSTREAM_FAILURE, detail=exc.detail)

        user = scan.first
        if user is None:
            if scan.stop_reason is StopReason.TIMEOUT and self.distinguish_search_timeout:
                return LoginOutcome(LoginResult.SEARCH_TIMEOUT)
            logger.info("Login for %s: no matching user (%s)", _mask(email), scan.stop_reason.value)
            return LoginOutcome(LoginResult.NOT_FOUND)

        if user.banned:
            logger.info("Login for %s rejected: account blocked", user.id)
            return LoginOutcome(LoginResult.ACCOUNT_BLOCKED, user_id=user.id)

        if not user.password_enabled:
            return LoginOutcome(LoginResult.PASSWORD_AUTH_UNAVAILABLE, user_id=user.id)

        return self._verify(user, password)

    def _verify(self, user: UserRecord, password: str) -> LoginOutcome:
        future = self._executor.submit(self.user_service.verify_password, user.id, password)
        try:
            verdict = future.result(timeout=self.verify_timeout)
        except FutureTimeout:
            # A call still queued is dropped; one already in flight keeps running unobserved.
            future.cancel()
            logger.warning("Password verification for %s exceeded %.1fs", user.id, self.verify_timeout)
            return LoginOutcome(LoginResult.TIMEOUT, user_id=user.id)
        except Exception as exc:
            logger.error("Password verification for %s failed: %s", user.id, exc)
            return LoginOutcome(LoginResult.UPSTREAM_FAILURE, user_id=user.id, detail=str(exc))

        if not verdict.get("verified"):
            logger.info("Login for %s rejected: invalid password", user.id)
            return LoginOutcome(LoginResult.INVALID_CREDENTIAL, user_id=user.id)

        logger.info("Login for %s succeeded", user.id)
        return LoginOutcome(LoginResult.SUCCESS, user_id=user.id, user=user.summary())

    def shutdown(self, wait: bool = False) -> None:
        """Release the executor; by default abandoned calls are not awaited."""
        self._executor.shutdown(wait=wait)


def _mask(email: str) -> str:
    """alice@example.com -> a***@example.com"""
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}" if domain else "***"
