"""Users blueprint exposing registration, login, verification and admin endpoints."""

from __future__ import annotations

from http import HTTPStatus
from typing import Optional

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt, jwt_required
from werkzeug.exceptions import BadRequest

from services import AccountService, ErrorKind, ServiceResult
from utils.request_validation import parse_json_request, string_field

users_bp = Blueprint("users", __name__)


def _service() -> AccountService:
    return current_app.extensions["account_service"]


def _failure(result: ServiceResult, status_overrides: Optional[dict] = None) -> tuple:
    """Serialize a failed result with the status its error kind maps to."""

    status = (status_overrides or {}).get(result.error, result.error.http_status)
    body = {"success": False, "message": result.message}
    if result.detail:
        body["error"] = result.detail
    return jsonify(body), status


@users_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Create an unverified account and email a verification link."""
    payload = parse_json_request(request)
    result = _service().register(
        email=string_field(payload, "email"),
        password=string_field(payload, "password"),
        firstname=string_field(payload, "firstname"),
        lastname=string_field(payload, "lastname"),
    )
    if not result.success:
        return _failure(result)
    return jsonify({"message": result.message}), HTTPStatus.CREATED


@users_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate an account and return a session token."""
    payload = parse_json_request(request)
    result = _service().login(
        email=string_field(payload, "email"),
        password=string_field(payload, "password"),
    )
    if not result.success:
        return _failure(result)
    return (
        jsonify(
            {
                "success": True,
                "body": {
                    "message": result.message,
                    "token": result.data["token"],
                    "data": result.data["account"].to_dict(),
                },
            }
        ),
        HTTPStatus.OK,
    )


@users_bp.route("/verify", methods=["GET"], defaults={"token": None})
@users_bp.route("/verify/<token>", methods=["GET"])
def verify(token: Optional[str]) -> tuple:
    """Confirm the email address the verification token was sent to."""
    token = token or request.args.get("token")
    result = _service().verify_email(token)
    if not result.success:
        return jsonify({"message": result.message}), result.error.http_status
    return jsonify({"message": result.message}), HTTPStatus.OK


@users_bp.route("", methods=["GET"])
@jwt_required()
def list_users() -> tuple:
    """List accounts, optionally filtered by firstname, lastname or email."""
    result = _service().list_accounts(request.args.to_dict())
    if not result.success:
        return _failure(result, {ErrorKind.INTERNAL_ERROR: HTTPStatus.BAD_REQUEST})
    return (
        jsonify({"success": True, "data": [account.to_dict() for account in result.data]}),
        HTTPStatus.OK,
    )


@users_bp.route("/forgot-password", methods=["POST"])
def forgot_password() -> tuple:
    """Email a single-use password reset link."""
    payload = parse_json_request(request)
    result = _service().request_password_reset(string_field(payload, "email"))
    if not result.success:
        return _failure(result)
    return jsonify({"message": result.message}), HTTPStatus.CREATED


@users_bp.route("/reset-password/<token>", methods=["GET"])
def check_reset_token(token: str) -> tuple:
    """Landing point of the emailed reset link; reports whether it is usable."""
    result = _service().check_password_reset(token)
    if not result.success:
        return _failure(result)
    return (
        jsonify({"success": True, "message": result.message, "email": result.data["email"]}),
        HTTPStatus.OK,
    )


@users_bp.route("/reset-password", methods=["POST"], defaults={"token": None})
@users_bp.route("/reset-password/<token>", methods=["POST"])
def reset_password(token: Optional[str]) -> tuple:
    """Set a new password using a reset token.

    The token comes from the link path or the body. When an email is
    supplied the token must belong to that account.
    """
    payload = parse_json_request(request)
    token = token or string_field(payload, "token")
    new_password = string_field(payload, "newPassword", "new_password")
    email = string_field(payload, "email")

    service = _service()
    if email is not None:
        result = service.forgot_password(email, new_password, token)
    else:
        result = service.complete_password_reset(token, new_password)
    if not result.success:
        return _failure(result)
    return jsonify({"message": result.message}), HTTPStatus.CREATED


def _account_id_from_body() -> int:
    payload = parse_json_request(request)
    try:
        return int(payload.get("id"))
    except (TypeError, ValueError):
        raise BadRequest("The id field must be an integer.") from None


@users_bp.route("", methods=["DELETE"], defaults={"account_id": None})
@users_bp.route("/<int:account_id>", methods=["DELETE"])
@jwt_required()
def delete_user(account_id: Optional[int]) -> tuple:
    """Delete an account; admins may delete any, others only their own."""
    if account_id is None:
        account_id = _account_id_from_body()
    result = _service().delete_account(account_id, actor=get_jwt())
    if not result.success:
        return _failure(result)
    return (
        jsonify({"success": True, "message": result.message}),
        HTTPStatus.CREATED,
    )
