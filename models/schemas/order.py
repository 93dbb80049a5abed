from marshmallow import Schema, fields, validates_schema, validate, ValidationError, EXCLUDE

from models.schemas.address import AddressCreateSchema

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered")


class OrderCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    address_id = fields.String(allow_none=True)
    shipping_address = fields.Nested(AddressCreateSchema, allow_none=True)

    @validates_schema
    def _one_address(self, data, **kwargs):
        if data.get("address_id") and data.get("shipping_address"):
            raise ValidationError("Provide either address_id or shipping_address, not both.")


class OrderStatusSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf(ORDER_STATUSES))


class OrderItemOutSchema(Schema):
    id = fields.String()
    product_id = fields.String(allow_none=True)
    name = fields.String()
    size = fields.String(allow_none=True)
    price = fields.Decimal(as_string=True, places=2)
    quantity = fields.Integer()


class OrderOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    total_amount = fields.Decimal(as_string=True, places=2)
    status = fields.Method("get_status")
    shipping_address = fields.Method("get_shipping")
    items = fields.List(fields.Nested(OrderItemOutSchema))
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

    def get_status(self, obj):
        return getattr(obj.status, "value", obj.status)

    def get_shipping(self, obj):
        return {
            "name": obj.shipping_name,
            "phone": obj.shipping_phone,
            "address": obj.shipping_address,
            "city": obj.shipping_city,
            "pincode": obj.shipping_pincode,
        }
