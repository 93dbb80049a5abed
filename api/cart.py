from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, request, jsonify, g, abort

from api.extensions import get_storage
from models.cart_item import CartItem
from models.product import Product, ProductSize
from models.schemas.cart import CartItemAddSchema, CartItemUpdateSchema, CartItemOutSchema
from utils.decorators import jwt_required

bp = Blueprint("cart", __name__)

item_add_schema = CartItemAddSchema()
item_update_schema = CartItemUpdateSchema()
item_out_schema = CartItemOutSchema()
items_out_schema = CartItemOutSchema(many=True)


def cart_items_for(user_id: str):
    session = get_storage().get_session()
    return (
        session.query(CartItem)
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.asc())
        .all()
    )


def cart_total(items) -> Decimal:
    return sum((item.line_total for item in items), Decimal("0.00")).quantize(Decimal("0.01"))


def _get_own_item_or_404(item_id: str) -> CartItem:
    session = get_storage().get_session()
    item = (
        session.query(CartItem)
        .filter(CartItem.id == item_id, CartItem.user_id == g.auth.subject_id)
        .first()
    )
    if not item:
        abort(404, description="Cart item not found")
    return item


def _select_size(product: Product, size_id: str | None) -> ProductSize:
    if size_id:
        for s in product.sizes:
            if s.id == size_id:
                return s
        abort(400, description="Selected size not available")
    if not product.sizes:
        abort(400, description="Selected size not available")
    # Default to the first listed size
    return product.sizes[0]


@bp.get("/cart")
@jwt_required()
def get_cart():
    """
    Get the current user's cart - user
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    responses:
      200:
        description: Cart items and total
    """
    items = cart_items_for(g.auth.subject_id)
    return jsonify(
        {
            "success": True,
            "items": items_out_schema.dump(items),
            "total": str(cart_total(items)),
        }
    )


@bp.post("/cart/items")
@jwt_required()
def add_item():
    """
    Add a product to the cart - user
    Adding the same product and size again increases the quantity.
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            product_id: { type: string }
            size_id: { type: string }
            quantity: { type: integer, minimum: 1, default: 1 }
    responses:
      201:
        description: Item added
      200:
        description: Quantity of an existing item updated
      404:
        description: Product not found
    """
    data = item_add_schema.load(request.get_json(silent=True) or {})
    storage = get_storage()

    product = storage.get(Product, data["product_id"])
    if not product:
        abort(404, description="Product not found")
    size = _select_size(product, data.get("size_id"))

    existing = (
        storage.get_session()
        .query(CartItem)
        .filter(
            CartItem.user_id == g.auth.subject_id,
            CartItem.product_id == product.id,
            CartItem.size == size.size,
        )
        .first()
    )
    if existing:
        existing.quantity += data["quantity"]
        storage.new(existing)
        storage.save()
        return jsonify({"success": True, "item": item_out_schema.dump(existing), "message": "Item quantity updated in cart"}), 200

    item = CartItem(
        user_id=g.auth.subject_id,
        product_id=product.id,
        size=size.size,
        price=size.price,
        quantity=data["quantity"],
    )
    item.product = product
    storage.new(item)
    storage.save()
    return jsonify({"success": True, "item": item_out_schema.dump(item), "message": "Item added to cart"}), 201


@bp.patch("/cart/items/<item_id>")
@jwt_required()
def update_item(item_id: str):
    """
    Change the quantity of a cart item - user
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: item_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            quantity: { type: integer, minimum: 1 }
    responses:
      200:
        description: Updated
      404:
        description: Not found
    """
    data = item_update_schema.load(request.get_json(silent=True) or {})
    item = _get_own_item_or_404(item_id)
    item.quantity = data["quantity"]
    storage = get_storage()
    storage.new(item)
    storage.save()
    return jsonify({"success": True, "item": item_out_schema.dump(item), "message": "Cart item updated successfully"})


@bp.delete("/cart/items/<item_id>")
@jwt_required()
def remove_item(item_id: str):
    """
    Remove an item from the cart - user
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    parameters:
      - in: path
        name: item_id
        type: string
        required: true
    responses:
      200:
        description: Removed
      404:
        description: Not found
    """
    item = _get_own_item_or_404(item_id)
    removed = item_out_schema.dump(item)
    storage = get_storage()
    storage.delete(item)
    storage.save()
    return jsonify({"success": True, "message": "Item removed from cart", "removedItem": removed})


@bp.delete("/cart")
@jwt_required()
def clear_cart():
    """
    Empty the cart - user
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    responses:
      200:
        description: Cart emptied
    """
    storage = get_storage()
    storage.get_session().query(CartItem).filter(CartItem.user_id == g.auth.subject_id).delete(
        synchronize_session="fetch"
    )
    storage.save()
    return jsonify({"success": True, "message": "Cart cleared"})
