from marshmallow import Schema, fields, validates, validate, ValidationError, EXCLUDE

from models.schemas.common import to_decimal_2


class ProductSizeSchema(Schema):
    id = fields.String(dump_only=True)
    size = fields.String(required=True, validate=validate.Length(min=1, max=32))
    price = fields.Decimal(required=True, as_string=True, places=2)

    @validates("price")
    def _validate_price(self, value, **kwargs):
        to_decimal_2(value)


class ProductCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    image = fields.String(allow_none=True, validate=validate.Length(max=512))
    description = fields.String(required=True, validate=validate.Length(min=1))
    benefits = fields.String(load_default="")
    category = fields.String(required=True, validate=validate.Length(min=1, max=128))
    stock = fields.Integer(required=True)
    sizes = fields.List(fields.Nested(ProductSizeSchema), required=True)

    @validates("stock")
    def _validate_stock(self, value, **kwargs):
        if value < 0:
            raise ValidationError("stock must be >= 0.")

    @validates("sizes")
    def _validate_sizes(self, value, **kwargs):
        if not value:
            raise ValidationError("Sizes must be a non-empty list.")


class ProductUpdateSchema(ProductCreateSchema):
    # All optional, but validate if present
    name = fields.String(validate=validate.Length(min=1, max=255))
    description = fields.String(validate=validate.Length(min=1))
    benefits = fields.String()
    category = fields.String(validate=validate.Length(min=1, max=128))
    stock = fields.Integer()
    sizes = fields.List(fields.Nested(ProductSizeSchema))


class ProductOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    image = fields.String(allow_none=True)
    description = fields.String()
    benefits = fields.String()
    category = fields.String()
    stock = fields.Integer()
    sizes = fields.List(fields.Nested(ProductSizeSchema))
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
