"""Tests for JSON error handlers."""
import pytest
from flask import Flask, abort

from admin_api.api.errors import register_error_handlers
from admin_api.core.errors import (
    AuthenticationError,
    NotFoundError,
    OperationTimeout,
    UpstreamFailure,
    ValidationError,
)
from conftest import make_config


def make_app(demo_mode):
    app = Flask(__name__)
    app.config["APP_CONFIG"] = make_config(demo_mode=demo_mode)
    register_error_handlers(app)

    @app.route("/raise/<kind>")
    def raise_kind(kind):
        errors = {
            "validation": ValidationError("Invalid email format"),
            "auth": AuthenticationError("Invalid password"),
            "missing": NotFoundError("User 'user_1' not found"),
            "timeout": OperationTimeout("Identity provider timed out"),
            "upstream": UpstreamFailure("User listing failed at offset 300", offset=300),
        }
        if kind == "boom":
            raise RuntimeError("unexpected")
        if kind == "abort":
            abort(405)
        raise errors[kind]

    @app.route("/echo", methods=["POST"])
    def echo():
        from flask import request
        return request.get_json()

    return app


@pytest.mark.parametrize(
    "kind,status,message",
    [
        ("validation", 400, "Invalid email format"),
        ("auth", 401, "Invalid password"),
        ("missing", 404, "User 'user_1' not found"),
        ("timeout", 408, "Identity provider timed out"),
    ],
)
def test_taxonomy_maps_to_status(kind, status, message):
    response = make_app(demo_mode=False).test_client().get(f"/raise/{kind}")

    assert response.status_code == status
    assert response.get_json() == {"success": False, "error": message}


@pytest.mark.parametrize("kind", ["validation", "auth", "missing", "timeout"])
def test_client_errors_carry_no_debug_in_demo(kind):
    response = make_app(demo_mode=True).test_client().get(f"/raise/{kind}")

    assert set(response.get_json()) == {"success", "error"}


def test_upstream_failure_hidden_in_production():
    response = make_app(demo_mode=False).test_client().get("/raise/upstream")

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "Identity provider request failed"}


def test_upstream_failure_debug_in_demo():
    response = make_app(demo_mode=True).test_client().get("/raise/upstream")

    body = response.get_json()
    assert response.status_code == 500
    assert body["error"] == "User listing failed at offset 300"
    assert body["debug"] == {"kind": "upstream_failure", "detail": "User listing failed at offset 300", "offset": 300}


def test_unhandled_exception():
    response = make_app(demo_mode=False).test_client().get("/raise/boom")

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "Internal Server Error"}


def test_http_exception_is_json():
    response = make_app(demo_mode=False).test_client().get("/raise/abort")

    assert response.status_code == 405
    assert response.get_json()["success"] is False


def test_malformed_json_body():
    response = make_app(demo_mode=False).test_client().post(
        "/echo", data="{not json", content_type="application/json"
    )

    assert response.status_code == 400
    assert response.get_json() == {"success": False, "error": "Malformed JSON body"}


def test_unknown_route_is_json_404(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert response.get_json()["success"] is False
