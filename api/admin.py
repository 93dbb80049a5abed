from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort

from api.extensions import get_storage, get_session_manager
from api.utils.pagination import parse_pagination, paginate
from models.order import Order, OrderStatus
from models.user import User, Role
from models.schemas.order import OrderOutSchema, OrderStatusSchema
from models.schemas.user import UserOutSchema, RoleUpdateSchema, SessionOutSchema
from utils.decorators import admin_required

logger = logging.getLogger(__name__)

bp = Blueprint("admin", __name__)

user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)
role_update_schema = RoleUpdateSchema()
order_out_schema = OrderOutSchema()
order_list_out_schema = OrderOutSchema(many=True)
order_status_schema = OrderStatusSchema()
session_list_schema = SessionOutSchema(many=True)


def _get_user_or_404(user_id: str) -> User:
    user = get_storage().get(User, user_id)
    if not user:
        abort(404, description="User not found")
    return user


@bp.get("/users")
@admin_required()
def list_users():
    """
    List all users - admin
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
      - in: query
        name: include_inactive
        type: boolean
        default: false
    responses:
      200: { description: OK }
      403: { description: Forbidden }
    """
    page, limit = parse_pagination()
    query = get_storage().get_session().query(User)
    if request.args.get("include_inactive", "false").lower() not in ("1", "true", "yes"):
        query = query.filter(User.active.is_(True))
    rows, meta = paginate(query.order_by(User.created_at.desc()), page, limit)
    return jsonify({"success": True, "data": user_list_out_schema.dump(rows), "meta": meta})


@bp.patch("/users/<user_id>/role")
@admin_required()
def set_role(user_id: str):
    """
    Set the role of a user - admin
    The user's sessions are revoked so the new role applies from the next login.
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: path
         name: user_id
         type: string
         required: true
      -  in: body
         name: body
         schema:
           type: object
           properties:
             role: { type: string, enum: [user, admin] }
    responses:
      200: { description: OK }
      400: { description: Admins cannot demote themselves }
      404: { description: Not found }
    """
    data = role_update_schema.load(request.get_json(silent=True) or {})
    user = _get_user_or_404(user_id)
    role = Role(data["role"])

    if user.id == g.auth.subject_id and role != Role.ADMIN:
        abort(400, description="Admins cannot remove their own admin role")

    if Role(user.role) != role:
        user.role = role
        storage = get_storage()
        storage.new(user)
        storage.save()
        get_session_manager().revoke_all(user.id)
        logger.info("Role of user %s set to %s by %s", user.id, role.value, g.auth.subject_id)

    return jsonify({"success": True, "data": user_out_schema.dump(user)}), 200


@bp.get("/users/<user_id>/sessions")
@admin_required()
def user_sessions(user_id: str):
    """
    List a user's live sessions - admin
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    user = _get_user_or_404(user_id)
    rows = get_session_manager().active_sessions(user.id)
    return jsonify({"success": True, "data": session_list_schema.dump(rows)})


@bp.post("/users/<user_id>/revoke-sessions")
@admin_required()
def revoke_user_sessions(user_id: str):
    """
    Revoke every session of a user - admin
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    user = _get_user_or_404(user_id)
    count = get_session_manager().revoke_all(user.id)
    return jsonify({"success": True, "revoked": count})


@bp.get("/orders")
@admin_required()
def list_orders():
    """
    List all orders - admin
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: query
        name: status
        type: string
        enum: [pending, processing, shipped, delivered]
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination()
    query = get_storage().get_session().query(Order)
    status = request.args.get("status")
    if status:
        try:
            query = query.filter(Order.status == OrderStatus(status))
        except ValueError:
            abort(400, description=f"Unsupported status: {status}")
    rows, meta = paginate(query.order_by(Order.created_at.desc()), page, limit)
    return jsonify({"success": True, "data": order_list_out_schema.dump(rows), "meta": meta})


@bp.patch("/orders/<order_id>/status")
@admin_required()
def set_order_status(order_id: str):
    """
    Update the status of an order - admin
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: order_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            status: { type: string, enum: [pending, processing, shipped, delivered] }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    data = order_status_schema.load(request.get_json(silent=True) or {})
    storage = get_storage()
    order = storage.get(Order, order_id)
    if not order:
        abort(404, description="Order not found")
    order.status = OrderStatus(data["status"])
    storage.new(order)
    storage.save()
    return jsonify({"success": True, "data": order_out_schema.dump(order)})
