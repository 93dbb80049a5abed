from __future__ import annotations

from flask import Blueprint, request, jsonify, abort
from sqlalchemy import or_, func

from api.extensions import get_storage
from api.utils.pagination import parse_pagination, paginate
from models.product import Product, ProductSize
from models.schemas.product import ProductCreateSchema, ProductUpdateSchema, ProductOutSchema
from utils.decorators import admin_required

bp = Blueprint("products", __name__)

# Schemas
product_create_schema = ProductCreateSchema()
product_update_schema = ProductUpdateSchema()
product_out_schema = ProductOutSchema()
products_out_schema = ProductOutSchema(many=True)


def apply_filters(query):
    category = request.args.get("category")
    q = request.args.get("q")

    if category:
        query = query.filter(func.lower(Product.category) == category.strip().lower())

    if q:
        # Case-insensitive search across name and description
        qnorm = f"%{q.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.name).like(qnorm),
                func.lower(Product.description).like(qnorm),
            )
        )
    return query


def _build_sizes(sizes):
    return [ProductSize(size=s["size"], price=s["price"]) for s in sizes]


def _get_product_or_404(product_id: str) -> Product:
    p = get_storage().get(Product, product_id)
    if not p:
        abort(404, description="Product not found")
    return p


@bp.post("/products")
@admin_required()
def create_product():
    """
    Create a new product - admin
    ---
    tags:
      - Products
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
            name: { type: string, maxLength: 255 }
            image: { type: string, description: "Image URL" }
            description: { type: string }
            benefits: { type: string }
            category: { type: string }
            stock: { type: integer, minimum: 0 }
            sizes:
              type: array
              items:
                type: object
                properties:
                  size: { type: string }
                  price: { type: string, example: "19.99" }
    responses:
      201:
        description: Created
      403:
        description: Forbidden
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = product_create_schema.load(payload)

    p = Product(
        name=data["name"],
        image=data.get("image"),
        description=data["description"],
        benefits=data.get("benefits", ""),
        category=data["category"],
        stock=data["stock"],
    )
    p.sizes = _build_sizes(data["sizes"])

    storage = get_storage()
    storage.new(p)
    storage.save()

    return jsonify({"success": True, "data": product_out_schema.dump(p)}), 201


@bp.get("/products")
def list_products():
    """
    List products with pagination, category filter and search
    ---
    tags:
      - Products
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 10
      - in: query
        name: category
        type: string
      - in: query
        name: q
        type: string
        description: "Case-insensitive substring search on name and description"
    responses:
      200:
        description: List of products
    """
    page, limit = parse_pagination(default_limit=10)
    query = apply_filters(get_storage().get_session().query(Product))
    rows, meta = paginate(query.order_by(Product.created_at.desc(), Product.name.asc()), page, limit)
    return jsonify({"success": True, "data": products_out_schema.dump(rows), "meta": meta})


@bp.get("/products/<product_id>")
def get_product(product_id: str):
    """
    Get a single product by id
    ---
    tags:
      - Products
    parameters:
      - in: path
        name: product_id
        type: string
        required: true
    responses:
      200:
        description: Product found
      404:
        description: Not found
    """
    p = _get_product_or_404(product_id)
    return jsonify({"success": True, "data": product_out_schema.dump(p)})


@bp.patch("/products/<product_id>")
@admin_required()
def update_product(product_id: str):
    """
    Update a product (partial) - admin
    Sending `sizes` replaces the whole size list.
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: product_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      404:
        description: Not found
      422:
        description: Validation error
    """
    p = _get_product_or_404(product_id)

    payload = request.get_json(silent=True) or {}
    data = product_update_schema.load(payload)

    for field in ["name", "image", "description", "benefits", "category", "stock"]:
        if field in data:
            setattr(p, field, data[field])
    if "sizes" in data:
        p.sizes = _build_sizes(data["sizes"])

    storage = get_storage()
    storage.new(p)
    storage.save()
    return jsonify({"success": True, "data": product_out_schema.dump(p)})


@bp.delete("/products/<product_id>")
@admin_required()
def delete_product(product_id: str):
    """
    Delete a product - admin
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - in: path
        name: product_id
        type: string
        required: true
    responses:
      200:
        description: Deleted
      404:
        description: Not found
    """
    p = _get_product_or_404(product_id)
    storage = get_storage()
    storage.delete(p)
    storage.save()
    return jsonify({"success": True, "message": "Product deleted successfully"})
