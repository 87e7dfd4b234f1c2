"""User administration endpoints (/user/*).

Handlers only parse the request and serialize the result; validation,
field mapping and provider error translation live in
``admin_api.core.user_admin``.
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from admin_api.api.guards import check_admin_token
from admin_api.core.user_admin import UserAdminService

bp = Blueprint("users", __name__, url_prefix="/user")

bp.before_request(check_admin_token)


def _service() -> UserAdminService:
    return current_app.extensions["user_admin"]


def _json_body():
    # silent=True: a missing/invalid body becomes None and fails validation with 400
    return request.get_json(silent=True)


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("", methods=["POST"])
def create_user():
    """Create a user: {email, password, firstName?, lastName?, phoneNumber?, ...Metadata?}."""
    user = _service().create_user(_json_body())
    return jsonify(user), 201


@bp.route("/<user_id>", methods=["DELETE"])
def delete_user(user_id: str):
    return jsonify(_service().delete_user(user_id)), 200


@bp.route("/list", methods=["GET"])
def list_users():
    """One page of users: ?limit=&offset=."""
    users = _service().list_users(request.args.get("limit"), request.args.get("offset"))
    return jsonify(users), 200


@bp.route("/<user_id>", methods=["GET"])
def get_user(user_id: str):
    return jsonify(_service().get_user(user_id)), 200


# ─────────────────────────────────────────────────────────────────────────────
# Updates
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/<user_id>", methods=["PATCH"])
def update_user(user_id: str):
    """Update profile fields; only the supplied ones change."""
    return jsonify(_service().update_profile(user_id, _json_body())), 200


@bp.route("/metadata/<user_id>", methods=["PATCH"])
def update_metadata(user_id: str):
    return jsonify(_service().update_metadata(user_id, _json_body())), 200


@bp.route("/password/<user_id>", methods=["PATCH"])
def set_password(user_id: str):
    return jsonify(_service().set_password(user_id, _json_body())), 200


# ─────────────────────────────────────────────────────────────────────────────
# Directory lookups
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/search", methods=["GET"])
def search_users():
    """Case-insensitive substring search on email: ?email=."""
    users, partial = _service().search_by_email(request.args.get("email"))
    response = jsonify(users)
    if partial:
        response.headers["X-Search-Partial"] = "true"
    return response, 200


@bp.route("/email/<email>", methods=["GET"])
def get_user_by_email(email: str):
    return jsonify(_service().lookup_by_email(email)), 200


# ─────────────────────────────────────────────────────────────────────────────
# Account state
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/block/<user_id>", methods=["POST"])
def block_user(user_id: str):
    return jsonify(_service().block(user_id)), 200


@bp.route("/unblock/<user_id>", methods=["POST"])
def unblock_user(user_id: str):
    return jsonify(_service().unblock(user_id)), 200


@bp.route("/verify-email/<user_id>", methods=["POST"])
def verify_email(user_id: str):
    return jsonify(_service().verify_email(user_id)), 200


@bp.route("/reset-password/<user_id>", methods=["POST"])
def reset_password(user_id: str):
    """Ask Clerk to email the user a password reset link."""
    return jsonify(_service().reset_password(user_id)), 200
