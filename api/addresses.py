from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort

from api.extensions import get_storage
from models.address import Address
from models.schemas.address import AddressCreateSchema, AddressUpdateSchema, AddressOutSchema
from utils.decorators import jwt_required

bp = Blueprint("addresses", __name__)

create_schema = AddressCreateSchema()
update_schema = AddressUpdateSchema()
out_schema = AddressOutSchema()
out_list_schema = AddressOutSchema(many=True)


def _query_own():
    return get_storage().get_session().query(Address).filter(Address.user_id == g.auth.subject_id)


def _get_own_or_404(address_id: str) -> Address:
    a = _query_own().filter(Address.id == address_id).first()
    if not a:
        abort(404, description="Address not found")
    return a


def _ensure_unique(data: dict, exclude_id: str | None = None) -> None:
    query = _query_own().filter(
        Address.address == data["address"],
        Address.city == data["city"],
        Address.pincode == data["pincode"],
    )
    if exclude_id:
        query = query.filter(Address.id != exclude_id)
    if query.first():
        abort(409, description="This address already exists")


@bp.get("/addresses")
@jwt_required()
def list_addresses():
    """
    List the current user's saved addresses - user
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    rows = _query_own().order_by(Address.created_at.asc()).all()
    return jsonify({"success": True, "data": out_list_schema.dump(rows)})


@bp.post("/addresses")
@jwt_required()
def create_address():
    """
    Save a new address - user
    ---
    tags: [Addresses]
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
            name: { type: string }
            phone: { type: string }
            address: { type: string }
            city: { type: string }
            pincode: { type: string }
    responses:
      201: { description: Created }
      409: { description: Duplicate address }
      422: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    _ensure_unique(data)
    a = Address(user_id=g.auth.subject_id, **data)
    storage = get_storage()
    storage.new(a)
    storage.save()
    return jsonify({"success": True, "data": out_schema.dump(a)}), 201


@bp.patch("/addresses/<address_id>")
@jwt_required()
def update_address(address_id: str):
    """
    Update a saved address - user
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: address_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
    responses:
      200: { description: OK }
      404: { description: Not found }
      409: { description: Duplicate address }
    """
    a = _get_own_or_404(address_id)
    data = update_schema.load(request.get_json(silent=True) or {})

    merged = {k: data.get(k, getattr(a, k)) for k in ("address", "city", "pincode")}
    _ensure_unique(merged, exclude_id=a.id)

    for field in ["name", "phone", "address", "city", "pincode"]:
        if field in data:
            setattr(a, field, data[field])

    storage = get_storage()
    storage.new(a)
    storage.save()
    return jsonify({"success": True, "data": out_schema.dump(a)})


@bp.delete("/addresses/<address_id>")
@jwt_required()
def delete_address(address_id: str):
    """
    Delete a saved address - user
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: address_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Not found }
    """
    a = _get_own_or_404(address_id)
    storage = get_storage()
    storage.delete(a)
    storage.save()
    return jsonify({"success": True, "message": "Address deleted"})
