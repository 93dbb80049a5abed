from marshmallow import Schema, fields, pre_load, validates, validate, EXCLUDE

from models.schemas.common import strip_strings, validate_phone, validate_pincode


class AddressCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    phone = fields.String(required=True)
    address = fields.String(required=True, validate=validate.Length(min=1, max=200))
    city = fields.String(required=True, validate=validate.Length(min=1, max=100))
    pincode = fields.String(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        return strip_strings(data) if isinstance(data, dict) else data

    @validates("phone")
    def _validate_phone(self, value, **kwargs):
        validate_phone(value)

    @validates("pincode")
    def _validate_pincode(self, value, **kwargs):
        validate_pincode(value)


class AddressUpdateSchema(AddressCreateSchema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    phone = fields.String()
    address = fields.String(validate=validate.Length(min=1, max=200))
    city = fields.String(validate=validate.Length(min=1, max=100))
    pincode = fields.String()


class AddressOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    phone = fields.String()
    address = fields.String()
    city = fields.String()
    pincode = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
