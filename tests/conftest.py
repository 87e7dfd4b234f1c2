"""Pytest shared fixtures: in-memory Clerk backend and Flask test client."""
import itertools
import json
import os
import pathlib
import sys
import threading
from typing import Optional
from urllib.parse import urlsplit

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")
os.environ.setdefault("CLERK_SECRET_KEY", "sk_test_unit")
os.environ.setdefault("CLERK_API_URL", "https://api.clerk.test/v1")
os.environ.setdefault("LOG_REQUEST_BODIES", "true")

import pytest
import requests

from admin_api.config import AppConfig
from admin_api.flask_app import create_app

CLERK_TEST_URL = "https://api.clerk.test/v1"


# ─────────────────────────────────────────────────────────────────────────────
# Fake Clerk Backend API
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    def __init__(self, url: str, payload=None, status_code: int = 200):
        self.url = url
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload) if payload is not None else ""
        self.content = self.text.encode()

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)


def make_user(
    user_id: str,
    email: str,
    *,
    first_name: str = "Test",
    last_name: str = "User",
    banned: bool = False,
    password_enabled: bool = True,
    verified: bool = True,
    extra_emails: tuple = (),
) -> dict:
    """Clerk-shaped user representation."""
    addresses = [
        {
            "id": f"idn_{user_id}_{index}",
            "email_address": address,
            "verification": {"status": "verified" if verified else "unverified"},
        }
        for index, address in enumerate((email,) + tuple(extra_emails))
    ]
    return {
        "id": user_id,
        "object": "user",
        "first_name": first_name,
        "last_name": last_name,
        "banned": banned,
        "password_enabled": password_enabled,
        "primary_email_address_id": addresses[0]["id"],
        "email_addresses": addresses,
        "phone_numbers": [],
        "public_metadata": {},
        "private_metadata": {},
        "unsafe_metadata": {},
    }


def _error(url: str, status: int, message: str, code: str) -> StubResponse:
    return StubResponse(url, {"errors": [{"message": message, "long_message": message, "code": code}]}, status)


class FakeClerk:
    """Routes requests.* calls made against CLERK_TEST_URL."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.passwords: dict[str, str] = {}
        self.calls: list[tuple[str, str, dict]] = []
        self.list_offsets: list[int] = []
        self.fail_list_at_offset: Optional[int] = None
        self.fail_all: bool = False
        self.verify_blocker: Optional[threading.Event] = None
        self.verify_error: Optional[int] = None
        self.reset_emails: list[str] = []
        self._ids = itertools.count(1)

    # Seeding helpers
    def add(self, user: dict, password: Optional[str] = None) -> dict:
        self.users[user["id"]] = user
        if password is not None:
            self.passwords[user["id"]] = password
        return user

    def seed(self, count: int, domain: str = "example.com") -> list[dict]:
        return [self.add(make_user(f"user_{i:03d}", f"user{i:03d}@{domain}")) for i in range(count)]

    # Transport
    def handle(self, method: str, url: str, params=None, json_body=None, headers=None) -> StubResponse:
        if not url.startswith(CLERK_TEST_URL):
            raise RuntimeError(f"Unexpected network access in tests: {method} {url}")
        if not (headers or {}).get("Authorization", "").startswith("Bearer "):
            return _error(url, 401, "Missing secret key", "authorization_invalid")
        self.calls.append((method, url, params or json_body or {}))
        if self.fail_all:
            raise requests.ConnectionError("Clerk unreachable")

        path = urlsplit(url).path[len(urlsplit(CLERK_TEST_URL).path):].strip("/")
        parts = path.split("/")
        handler = getattr(self, f"_{method.lower()}_{parts[0]}", None)
        if handler is None:
            return _error(url, 404, "Not found", "resource_not_found")
        return handler(url, parts[1:], params or {}, json_body or {})

    # /users
    def _get_users(self, url, rest, params, body):
        if rest:
            user = self.users.get(rest[0])
            if user is None:
                return _error(url, 404, "User not found", "resource_not_found")
            return StubResponse(url, user)
        limit = int(params.get("limit", 10))
        offset = int(params.get("offset", 0))
        self.list_offsets.append(offset)
        if self.fail_list_at_offset is not None and offset >= self.fail_list_at_offset:
            return _error(url, 503, "Service unavailable", "service_unavailable")
        ordered = list(self.users.values())
        return StubResponse(url, ordered[offset:offset + limit])

    def _post_users(self, url, rest, params, body):
        if not rest:
            user_id = f"user_new_{next(self._ids)}"
            emails = body.get("email_address") or []
            if any(e == u["email_addresses"][0]["email_address"] for u in self.users.values() for e in emails):
                return _error(url, 422, "That email address is taken.", "form_identifier_exists")
            user = make_user(
                user_id,
                emails[0],
                first_name=body.get("first_name"),
                last_name=body.get("last_name"),
            )
            for key in ("public_metadata", "private_metadata", "unsafe_metadata"):
                if key in body:
                    user[key] = body[key]
            self.add(user, body.get("password"))
            return StubResponse(url, user)

        user = self.users.get(rest[0])
        if user is None:
            return _error(url, 404, "User not found", "resource_not_found")
        action = rest[1] if len(rest) > 1 else ""
        if action == "ban":
            user["banned"] = True
            return StubResponse(url, user)
        if action == "unban":
            user["banned"] = False
            return StubResponse(url, user)
        if action == "verify_password":
            if self.verify_blocker is not None:
                self.verify_blocker.wait(5)
            if self.verify_error is not None:
                return _error(url, self.verify_error, "Upstream exploded", "internal_clerk_error")
            if self.passwords.get(user["id"]) == body.get("password"):
                return StubResponse(url, {"verified": True})
            return _error(url, 422, "Password is incorrect.", "incorrect_password")
        if action == "password_reset":
            self.reset_emails.append(user["id"])
            return StubResponse(url, {"id": user["id"], "object": "password_reset"})
        return _error(url, 404, "Not found", "resource_not_found")

    def _patch_users(self, url, rest, params, body):
        user = self.users.get(rest[0])
        if user is None:
            return _error(url, 404, "User not found", "resource_not_found")
        if len(rest) > 1 and rest[1] == "metadata":
            for key, value in body.items():
                user[key] = {**user.get(key, {}), **value}
            return StubResponse(url, user)
        if "password" in body:
            if len(body["password"]) < 8:
                return _error(url, 422, "Passwords must be 8 characters or more.", "form_password_length_too_short")
            self.passwords[user["id"]] = body.pop("password")
        user.update(body)
        return StubResponse(url, user)

    def _delete_users(self, url, rest, params, body):
        if self.users.pop(rest[0], None) is None:
            return _error(url, 404, "User not found", "resource_not_found")
        return StubResponse(url, {"id": rest[0], "object": "user", "deleted": True})

    # /email_addresses, /phone_numbers
    def _post_email_addresses(self, url, rest, params, body):
        user = self.users.get(body.get("user_id"))
        if user is None:
            return _error(url, 404, "User not found", "resource_not_found")
        entry = {
            "id": f"idn_{user['id']}_{len(user['email_addresses'])}",
            "email_address": body["email_address"],
            "verification": {"status": "verified" if body.get("verified") else "unverified"},
        }
        user["email_addresses"].append(entry)
        if body.get("primary"):
            user["primary_email_address_id"] = entry["id"]
        return StubResponse(url, entry)

    def _patch_email_addresses(self, url, rest, params, body):
        for user in self.users.values():
            for entry in user["email_addresses"]:
                if entry["id"] == rest[0]:
                    if body.get("verified"):
                        entry["verification"] = {"status": "verified"}
                    return StubResponse(url, entry)
        return _error(url, 404, "Email address not found", "resource_not_found")

    def _post_phone_numbers(self, url, rest, params, body):
        user = self.users.get(body.get("user_id"))
        if user is None:
            return _error(url, 404, "User not found", "resource_not_found")
        entry = {"id": f"idn_phone_{len(user['phone_numbers'])}", "phone_number": body["phone_number"]}
        user["phone_numbers"].append(entry)
        if body.get("primary"):
            user["primary_phone_number_id"] = entry["id"]
        return StubResponse(url, entry)


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def fake_clerk():
    return FakeClerk()


@pytest.fixture(autouse=True)
def _route_requests_to_fake_clerk(monkeypatch, fake_clerk, tmp_path):
    """Prevent tests from hitting the network; every requests verb goes to FakeClerk."""

    def _verb(method):
        def _call(url, params=None, json=None, headers=None, **kwargs):
            return fake_clerk.handle(method, url, params=params, json_body=json, headers=headers)
        return _call

    for method in ("get", "post", "patch", "delete"):
        monkeypatch.setattr(requests, method, _verb(method.upper()))

    monkeypatch.setenv("AUDIT_LOG_DIR", str(tmp_path / "audit"))
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "unit-test-signing-key")


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    base = dict(
        demo_mode=True,
        clerk_secret_key="sk_test_unit",
        clerk_api_url=CLERK_TEST_URL,
        request_timeout=5.0,
        page_size=2,
        max_page_size=500,
        max_scan_offset=10000,
        list_default_limit=50,
        login_search_budget=10.0,
        login_verify_timeout=5.0,
        distinguish_search_timeout=False,
        admin_api_token="",
        log_level="INFO",
        log_request_bodies=True,
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def app_config():
    return make_config()


@pytest.fixture()
def flask_app(app_config):
    flask_app = create_app(app_config)
    flask_app.config.update(TESTING=True)
    yield flask_app
    flask_app.extensions["credential_gate"].shutdown()


@pytest.fixture()
def client(flask_app):
    with flask_app.test_client() as client:
        yield client
