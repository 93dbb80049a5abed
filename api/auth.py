"""
Authentication blueprint:
- POST   /auth/register
- POST   /auth/login
- POST   /auth/refresh
- POST   /auth/logout
- POST   /auth/logout-all
- GET    /auth/verify
- GET    /auth/sessions
- DELETE /auth/sessions/<session_id>

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and long-lived refresh tokens (JWTs signed
  with two different HS256 secrets)
- Stores every issued token as a session record so it can be revoked or rotated
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort

from api.extensions import get_storage, get_users, get_session_manager, get_current_user
from models.schemas.user import (
    UserCreateSchema,
    UserLoginSchema,
    UserOutSchema,
    UserSummarySchema,
    SessionOutSchema,
)
from utils.auth_errors import AuthError, AuthErrorKind
from utils.decorators import jwt_required, get_bearer_token
from utils.security import hash_password, password_needs_rehash, verify_password

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()
user_summary_schema = UserSummarySchema()


def token_response(pair, message: str | None = None):
    body = {
        "success": True,
        "token": pair.access_token,
        "refreshToken": pair.refresh_token,
        "expiresIn": pair.expires_in,
    }
    if message:
        body["message"] = message
    body["user"] = user_summary_schema.dump(pair.user)
    return body


def _body_field(name: str):
    """String field of a JSON object body, or None for any other body shape."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None
    value = payload.get(name)
    return value if isinstance(value, str) and value else None


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
            phone: { type: string }
    responses:
      201:
        description: Created
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    users = get_users()
    if users.email_taken(data["email"]):
        abort(409, description="This email is already registered. Please use a different email.")

    user = users.create(
        name=data["name"],
        email=data["email"],
        password_hash=hash_password(data["password"]),
        phone=data["phone"],
    )
    get_storage().save()
    logger.info("Registered user %s", user.id)

    return jsonify(
        {
            "success": True,
            "message": "User registered successfully",
            "userId": user.id,
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: return an access token and a refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    user = get_users().find_by_email(data["email"])
    if not user or not verify_password(data["password"], user.password_hash):
        abort(401, description="Invalid email or password")

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(data["password"])
        get_storage().new(user)

    pair = get_session_manager().issue(user)
    return jsonify(token_response(pair, message="Login successful")), 200


@bp.post("/refresh")
def refresh():
    """
    Use a refresh token to obtain a new access and refresh token (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New token pair; the old refresh token is no longer valid
      401:
        description: REFRESH_FAILED
    """
    token = _body_field("refreshToken")
    if token is None:
        raise AuthError(AuthErrorKind.INVALID_REFRESH, "Refresh token required")

    pair = get_session_manager().rotate(token)
    return jsonify(token_response(pair)), 200


@bp.post("/logout")
def logout():
    """
    Logout: revokes the bearer token (and the refresh token, if sent)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logged out (also when the token was already revoked)
      400:
        description: No bearer token sent
    """
    token = get_bearer_token()
    if not token:
        abort(400, description="Token not provided")

    manager = get_session_manager()
    manager.revoke(token)

    refresh_token = _body_field("refreshToken")
    if refresh_token:
        manager.revoke(refresh_token)

    return jsonify({"success": True, "message": "Logged out successfully"}), 200


@bp.post("/logout-all")
@jwt_required()
def logout_all():
    """
    Revoke every session of the current user, on every device
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: All sessions revoked
      401:
        description: Unauthorized
    """
    count = get_session_manager().revoke_all(g.auth.subject_id)
    return jsonify({"success": True, "message": "Logged out from all devices", "revoked": count}), 200


@bp.get("/verify")
@jwt_required()
def verify():
    """
    Check the bearer token and return the user it belongs to
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Token is valid
      401:
        description: AUTH_FAILED or TOKEN_EXPIRED
    """
    user = get_current_user()
    return jsonify({"success": True, "user": user_out_schema.dump(user)}), 200


@bp.get("/sessions")
@jwt_required()
def list_sessions():
    """
    List the current user's live sessions (tokens themselves are never returned)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
    """
    rows = get_session_manager().active_sessions(g.auth.subject_id)
    schema = SessionOutSchema(many=True, current_session_id=g.auth.session_id)
    return jsonify({"success": True, "data": schema.dump(rows)}), 200


@bp.delete("/sessions/<session_id>")
@jwt_required()
def revoke_session(session_id: str):
    """
    Revoke one of the current user's sessions
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    parameters:
      - in: path
        name: session_id
        type: string
        required: true
    responses:
      200:
        description: Revoked
      404:
        description: Not one of the caller's sessions
    """
    if not get_session_manager().revoke_session(g.auth.subject_id, session_id):
        abort(404, description="Session not found")
    return jsonify({"success": True, "message": "Session revoked"}), 200
