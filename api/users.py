from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort

from api.extensions import get_storage, get_users, get_session_manager, get_current_user
from models.cart_item import CartItem
from models.schemas.user import UserUpdateSchema, UserOutSchema
from utils.decorators import jwt_required
from utils.security import hash_password

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Get current user info - user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = get_current_user()
    return jsonify({"success": True, "user": user_out_schema.dump(user)}), 200


@bp.put("/users/me")
@jwt_required()
def update_me():
    """
    Update the current user's profile - user
    Changing the password signs out every other session.
    ---
    tags:
      - Users
    security:
      - Bearer: []
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
            phone: { type: string }
            address: { type: string }
            profile_image: { type: string }
            password: { type: string }
    responses:
      200:
        description: Updated
      400:
        description: No valid fields to update
      409:
        description: Email already registered
    """
    payload = request.get_json(silent=True) or {}
    data = user_update_schema.load(payload)
    if not data:
        abort(400, description="No valid fields to update")

    user = get_current_user()

    if "email" in data and data["email"] != user.email:
        if get_users().email_taken(data["email"]):
            abort(409, description="This email is already registered. Please use a different email.")
        user.email = data["email"]

    for field in ["name", "phone", "address", "profile_image"]:
        if field in data:
            setattr(user, field, data[field])

    password_changed = "password" in data
    if password_changed:
        user.password_hash = hash_password(data["password"])

    storage = get_storage()
    storage.new(user)
    storage.save()

    if password_changed:
        get_session_manager().revoke_all(user.id, keep_session_id=g.auth.session_id)
        logger.info("Password changed for user %s; other sessions revoked", user.id)

    return jsonify(
        {
            "success": True,
            "message": "Profile updated successfully",
            "user": user_out_schema.dump(user),
        }
    ), 200


@bp.delete("/users/me")
@jwt_required()
def delete_me():
    """
    Deactivate the current user's account - user
    The account is kept for order history, its sessions are revoked and its cart emptied.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: Account deleted
      401:
        description: Unauthorized
    """
    user = get_current_user()
    storage = get_storage()

    user.active = False
    storage.get_session().query(CartItem).filter(CartItem.user_id == user.id).delete(synchronize_session="fetch")
    storage.new(user)
    storage.save()

    get_session_manager().revoke_all(user.id)
    logger.info("Deactivated user %s", user.id)
    return jsonify({"success": True, "message": "Account deleted successfully"}), 200
