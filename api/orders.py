from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort

from api.cart import cart_items_for, cart_total
from api.extensions import get_storage
from api.utils.pagination import parse_pagination, paginate
from models.address import Address
from models.cart_item import CartItem
from models.order import Order, OrderItem, OrderStatus
from models.schemas.order import OrderCreateSchema, OrderOutSchema
from utils.decorators import jwt_required

logger = logging.getLogger(__name__)

bp = Blueprint("orders", __name__)

order_create_schema = OrderCreateSchema()
order_out_schema = OrderOutSchema()
order_list_out_schema = OrderOutSchema(many=True)


def _shipping_fields(data) -> dict:
    if data.get("address_id"):
        address = (
            get_storage()
            .get_session()
            .query(Address)
            .filter(Address.id == data["address_id"], Address.user_id == g.auth.subject_id)
            .first()
        )
        if not address:
            abort(404, description="Address not found")
        source = {
            "name": address.name,
            "phone": address.phone,
            "address": address.address,
            "city": address.city,
            "pincode": address.pincode,
        }
    else:
        source = data.get("shipping_address") or {}
    return {f"shipping_{k}": source.get(k) for k in ("name", "phone", "address", "city", "pincode")}


@bp.post("/orders")
@jwt_required()
def create_order():
    """
    Place an order from the current cart - user
    The cart is emptied once the order is stored.
    ---
    tags:
      - Orders
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
            address_id: { type: string, description: "Saved address to ship to" }
            shipping_address:
              type: object
              properties:
                name: { type: string }
                phone: { type: string }
                address: { type: string }
                city: { type: string }
                pincode: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Cart is empty
    """
    data = order_create_schema.load(request.get_json(silent=True) or {})
    items = cart_items_for(g.auth.subject_id)
    if not items:
        abort(400, description="Cart is empty")

    order = Order(
        user_id=g.auth.subject_id,
        total_amount=cart_total(items),
        status=OrderStatus.PENDING,
        **_shipping_fields(data),
    )
    order.items = [
        OrderItem(
            product_id=item.product_id,
            name=item.product.name,
            size=item.size,
            price=item.price,
            quantity=item.quantity,
        )
        for item in items
    ]

    storage = get_storage()
    storage.new(order)
    storage.get_session().query(CartItem).filter(CartItem.user_id == g.auth.subject_id).delete(
        synchronize_session="fetch"
    )
    storage.save()
    logger.info("Order %s placed by user %s", order.id, g.auth.subject_id)

    return jsonify({"success": True, "order": order_out_schema.dump(order)}), 201


@bp.get("/orders")
@jwt_required()
def list_orders():
    """
    List the current user's orders - user
    ---
    tags:
      - Orders
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
    responses:
      200:
        description: List of orders
    """
    page, limit = parse_pagination()
    query = (
        get_storage()
        .get_session()
        .query(Order)
        .filter(Order.user_id == g.auth.subject_id)
        .order_by(Order.created_at.desc())
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"success": True, "data": order_list_out_schema.dump(rows), "meta": meta})


@bp.get("/orders/<order_id>")
@jwt_required()
def get_order(order_id: str):
    """
    Get one order - user (own orders) or admin (any order)
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: path
        name: order_id
        type: string
        required: true
    responses:
      200:
        description: Order found
      404:
        description: Not found
    """
    order = get_storage().get(Order, order_id)
    # Other users' orders look exactly like missing ones
    if not order or (order.user_id != g.auth.subject_id and g.auth.role != "admin"):
        abort(404, description="Order not found")
    return jsonify({"success": True, "order": order_out_schema.dump(order)})
