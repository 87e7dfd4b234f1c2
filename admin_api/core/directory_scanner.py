"""Bounded directory scanning over Clerk's user listing.

Clerk's ``GET /users`` endpoint caps the page size and does not give the
admin facade a usable cursor, so lookups by email page through the whole
directory and filter locally. Every scan is bounded:

    - an empty page or a short page ends the scan
    - the cumulative offset never passes ``max_offset``
    - an optional wall-clock budget is checked between pages

A short page is taken as end-of-data. That is only correct while Clerk never
returns a short page before the last one; server-side filtering would break
it.

Pages are fetched strictly one after another. Each offset only makes sense
once the previous page came back full, and concurrent paging over a
directory that is being modified could skip or double-count users.
"""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import requests

from admin_api.core.clerk import ClerkError, UserRecord
from admin_api.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)

FetchPage = Callable[[int, int], "list[UserRecord]"]
Predicate = Callable[[UserRecord], bool]


class StopReason(str, Enum):
    """Why a scan stopped requesting pages."""

    EXHAUSTED = "exhausted"
    SHORT_PAGE = "short_page"
    SAFETY_LIMIT = "safety_limit"
    TIMEOUT = "timeout"
    MATCHED = "matched"
    FAILED = "failed"


@dataclass
class ScanResult:
    """Outcome of one scan."""

    matches: list[UserRecord] = field(default_factory=list)
    pages_requested: int = 0
    records_scanned: int = 0
    stop_reason: StopReason = StopReason.EXHAUSTED
    failure: Optional[UpstreamFailure] = None

    @property
    def partial(self) -> bool:
        """True when the scan ended before it could see the whole directory."""
        return self.stop_reason in (StopReason.FAILED, StopReason.TIMEOUT, StopReason.SAFETY_LIMIT)

    @property
    def first(self) -> Optional[UserRecord]:
        return self.matches[0] if self.matches else None


# ─────────────────────────────────────────────────────────────────────────────
# Predicates
# ─────────────────────────────────────────────────────────────────────────────

def email_equals(email: str) -> Predicate:
    """Match users owning ``email`` (case-insensitive, any address)."""
    target = email.strip().lower()

    def _match(user: UserRecord) -> bool:
        return any(address.lower() == target for address in user.email_addresses)

    return _match


def email_contains(fragment: str) -> Predicate:
    """Match users with an address containing ``fragment`` (case-insensitive)."""
    needle = fragment.strip().lower()

    def _match(user: UserRecord) -> bool:
        return any(needle in address.lower() for address in user.email_addresses)

    return _match


# ─────────────────────────────────────────────────────────────────────────────
# Scanner
# ─────────────────────────────────────────────────────────────────────────────

class DirectoryScanner:
    """Pages through the user directory in fixed-size batches.

    Usage:
        scanner = DirectoryScanner(user_service.get_user_list, page_size=100, max_offset=10000)
        result = scanner.scan(email_equals("alice@example.com"), first_match=True)
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        page_size: int = 100,
        max_offset: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the scanner.

        Args:
            fetch_page: ``fetch_page(limit, offset)`` returning one page of users
            page_size: Records per page; must not exceed the provider's cap
            max_offset: Hard ceiling on the cumulative offset
            clock: Monotonic clock used for the optional time budget
        """
        if page_size < 1:
            raise ValueError("page_size must be a positive integer")
        if max_offset < 1:
            raise ValueError("max_offset must be a positive integer")
        self.fetch_page = fetch_page
        self.page_size = page_size
        self.max_offset = max_offset
        self._clock = clock

    def scan(
        self,
        predicate: Predicate,
        *,
        first_match: bool = False,
        max_elapsed: Optional[float] = None,
        best_effort: bool = False,
    ) -> ScanResult:
        """Collect users matching ``predicate``.

        Args:
            predicate: Filter applied to every fetched user
            first_match: Stop at the first matching user
            max_elapsed: Optional wall-clock budget in seconds, checked between pages
            best_effort: On a page failure, return what was collected so far
                instead of raising

        Returns:
            ScanResult with matches and the stop reason

        Raises:
            UpstreamFailure: A page request failed and ``best_effort`` is False
        """
        result = ScanResult()
        started = self._clock()
        offset = 0

        while True:
            if offset >= self.max_offset:
                result.stop_reason = StopReason.SAFETY_LIMIT
                logger.warning(
                    "Directory scan hit the safety limit (offset=%d, max_offset=%d)",
                    offset, self.max_offset,
                )
                break

            if max_elapsed is not None and self._clock() - started > max_elapsed:
                result.stop_reason = StopReason.TIMEOUT
                logger.info("Directory scan ran out of time after %d page(s)", result.pages_requested)
                break

            try:
                page = self.fetch_page(self.page_size, offset)
            except (ClerkError, requests.RequestException) as exc:
                failure = UpstreamFailure(f"User listing failed at offset {offset}: {exc}", offset=offset)
                logger.error("Directory scan failed at offset %d: %s", offset, exc)
                if not best_effort:
                    raise failure from exc
                result.stop_reason = StopReason.FAILED
                result.failure = failure
                break

            result.pages_requested += 1
            if not page:
                result.stop_reason = StopReason.EXHAUSTED
                break

            for user in page:
                result.records_scanned += 1
                if predicate(user):
                    result.matches.append(user)
                    if first_match:
                        break
            if first_match and result.matches:
                result.stop_reason = StopReason.MATCHED
                break

            if len(page) < self.page_size:
                result.stop_reason = StopReason.SHORT_PAGE
                break

            offset += self.page_size

        logger.debug(
            "Directory scan stopped: reason=%s pages=%d scanned=%d matches=%d",
            result.stop_reason.value, result.pages_requested, result.records_scanned, len(result.matches),
        )
        return result

    def find_by_email(self, email: str, max_elapsed: Optional[float] = None) -> ScanResult:
        """First-match lookup of a user by exact email."""
        return self.scan(email_equals(email), first_match=True, max_elapsed=max_elapsed)

    def search_by_email(self, fragment: str) -> ScanResult:
        """All users whose email contains ``fragment``; failures return partial results."""
        return self.scan(email_contains(fragment), best_effort=True)
