import re
from decimal import Decimal, InvalidOperation

from marshmallow import ValidationError

PHONE_RE = re.compile(r"^[0-9]{10,15}$")
PINCODE_RE = re.compile(r"^[1-9][0-9]{5}$")


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def strip_strings(data: dict) -> dict:
    """Trim surrounding whitespace from every string value."""
    return {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}


def validate_phone(value: str) -> None:
    if value is not None and not PHONE_RE.match(value):
        raise ValidationError(f"{value} is not a valid phone number!")


def validate_pincode(value: str) -> None:
    if not PINCODE_RE.match(value or ""):
        raise ValidationError("Invalid pincode.")


def to_decimal_2(value) -> Decimal:
    if value is None:
        return None
    try:
        d = Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValidationError("Invalid decimal.")
    if d < 0:
        raise ValidationError("Must be greater than or equal to 0.")
    return d.quantize(Decimal("0.01"))
