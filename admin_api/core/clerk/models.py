"""Read-only projections of Clerk resources."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class UserRecord:
    """The parts of a Clerk user the admin facade reasons about.

    ``email_addresses`` keeps Clerk's order except that the primary address
    (``primary_email_address_id``) is moved to index 0. ``raw`` is the
    untouched provider representation relayed to API callers.
    """

    id: str
    email_addresses: tuple[str, ...] = ()
    banned: bool = False
    password_enabled: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_verified: bool = False
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "UserRecord":
        """Build a record from a Clerk ``User`` JSON object."""
        entries = [e for e in (data.get("email_addresses") or []) if isinstance(e, dict)]
        primary_id = data.get("primary_email_address_id")
        primary = next((e for e in entries if primary_id and e.get("id") == primary_id), None)
        if primary is not None:
            entries.remove(primary)
            entries.insert(0, primary)
        elif entries:
            primary = entries[0]

        verification = (primary or {}).get("verification") or {}
        return cls(
            id=data["id"],
            email_addresses=tuple(e.get("email_address", "") for e in entries),
            banned=bool(data.get("banned", False)),
            password_enabled=bool(data.get("password_enabled", False)),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            email_verified=verification.get("status") == "verified",
            raw=data,
        )

    @property
    def primary_email(self) -> Optional[str]:
        return self.email_addresses[0] if self.email_addresses else None

    @property
    def primary_email_address_id(self) -> Optional[str]:
        """Clerk id of the primary email address, if any."""
        primary_id = self.raw.get("primary_email_address_id")
        if primary_id:
            return primary_id
        entries = self.raw.get("email_addresses") or []
        return entries[0].get("id") if entries else None

    def summary(self) -> dict[str, Any]:
        """Public profile returned after a successful login."""
        return {
            "id": self.id,
            "email": self.primary_email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "emailVerified": self.email_verified,
        }
