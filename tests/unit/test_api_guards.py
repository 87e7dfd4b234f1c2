"""Tests for the static admin token guard."""
import logging

import pytest

from admin_api.flask_app import create_app
from conftest import make_config

TOKEN = "admin-token-for-tests"


@pytest.fixture()
def guarded_client(fake_clerk):
    fake_clerk.seed(1)
    app = create_app(make_config(admin_api_token=TOKEN))
    with app.test_client() as client:
        yield client
    app.extensions["credential_gate"].shutdown()


def test_no_token_configured_leaves_routes_open(client, fake_clerk):
    fake_clerk.seed(1)
    assert client.get("/user/user_000").status_code == 200


def test_missing_header_rejected(guarded_client, fake_clerk):
    response = guarded_client.get("/user/user_000")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"].startswith("Bearer")
    assert "Authorization header missing" in response.get_json()["error"]
    assert fake_clerk.calls == []


def test_wrong_scheme_rejected(guarded_client):
    response = guarded_client.get("/user/user_000", headers={"Authorization": f"Basic {TOKEN}"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "Authorization header must use Bearer token scheme."


def test_wrong_token_rejected(guarded_client):
    response = guarded_client.post(
        "/auth/login",
        json={"email": "user000@example.com", "password": "x"},
        headers={"Authorization": "Bearer not-the-token"},
    )

    assert response.status_code == 401
    assert response.get_json() == {"success": False, "error": "Invalid admin token."}


def test_valid_token_accepted(guarded_client):
    response = guarded_client.get("/user/user_000", headers={"Authorization": f"Bearer {TOKEN}"})

    assert response.status_code == 200
    assert response.get_json()["id"] == "user_000"


def test_health_is_not_guarded(guarded_client):
    assert guarded_client.get("/health").status_code == 200


def test_token_never_logged(guarded_client, caplog):
    with caplog.at_level(logging.INFO, logger="admin_api.api.guards"):
        guarded_client.get("/user/user_000", headers={"Authorization": "Bearer leaked-token-value"})

    assert "FAILED admin auth" in caplog.text
    assert "leaked-token-value" not in caplog.text
