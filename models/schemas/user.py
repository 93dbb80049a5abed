from marshmallow import Schema, fields, pre_load, validates, validate, ValidationError, EXCLUDE

from models.schemas.common import normalize_email, strip_strings, validate_phone
from utils.security import password_too_short

ROLES = ("user", "admin")


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    phone = fields.String(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = strip_strings(data)
            if "email" in data:
                data["email"] = normalize_email(data["email"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if password_too_short(value):
            raise ValidationError("Password must be at least 8 characters long.")

    @validates("phone")
    def _validate_phone(self, value, **kwargs):
        validate_phone(value)


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = normalize_email(data["email"])
        return data


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(validate=validate.Length(min=1, max=50))
    email = fields.Email()
    phone = fields.String(allow_none=True)
    address = fields.String(allow_none=True, validate=validate.Length(max=200))
    profile_image = fields.String(validate=validate.Length(min=1, max=255))
    password = fields.String(load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = strip_strings(data)
            if "email" in data:
                data["email"] = normalize_email(data["email"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if password_too_short(value):
            raise ValidationError("Password must be at least 8 characters long.")

    @validates("phone")
    def _validate_phone(self, value, **kwargs):
        validate_phone(value)


class RoleUpdateSchema(Schema):
    role = fields.String(required=True, validate=validate.OneOf(ROLES))


class UserOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    email = fields.String()
    role = fields.Method("get_role")
    phone = fields.String(allow_none=True)
    address = fields.String(allow_none=True)
    profile_image = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

    def get_role(self, obj):
        return getattr(obj.role, "value", obj.role)


class UserSummarySchema(Schema):
    """The short form returned alongside freshly issued tokens."""
    id = fields.String()
    name = fields.String()
    email = fields.String()
    role = fields.Method("get_role")

    def get_role(self, obj):
        return getattr(obj.role, "value", obj.role)


class SessionOutSchema(Schema):
    id = fields.String()
    kind = fields.String()
    pair_id = fields.String()
    created_at = fields.DateTime()
    last_used_at = fields.DateTime()
    current = fields.Method("is_current")

    def __init__(self, *args, current_session_id=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.current_session_id = current_session_id

    def is_current(self, obj):
        return obj.id == self.current_session_id
