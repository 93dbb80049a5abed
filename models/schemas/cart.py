from marshmallow import Schema, fields, validate, EXCLUDE


class CartItemAddSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    product_id = fields.String(required=True)
    size_id = fields.String(allow_none=True)
    quantity = fields.Integer(load_default=1, validate=validate.Range(min=1))


class CartItemUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    quantity = fields.Integer(required=True, validate=validate.Range(min=1))


class CartItemOutSchema(Schema):
    id = fields.String()
    product_id = fields.String()
    name = fields.Method("get_name")
    image = fields.Method("get_image")
    price = fields.Decimal(as_string=True, places=2)
    size = fields.String()
    quantity = fields.Integer()

    def get_name(self, obj):
        return obj.product.name if obj.product else None

    def get_image(self, obj):
        return obj.product.image if obj.product else None
