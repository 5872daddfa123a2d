"""Small helpers shared by the payment views and services."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from .exceptions import ValidationError

CENT = Decimal("0.01")


def amount_str(amount) -> str:
    """Format ``amount`` with exactly two decimals, rounding half up."""
    try:
        q = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("Invalid order amount")
    if not q.is_finite():
        raise ValidationError("Invalid order amount")
    return format(q, "f")


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value)
    except DjangoValidationError:
        return False
    return True


def za_cell_number(raw: str) -> str:
    digits = re.sub(r"\D", "", raw or "")
    if digits.startswith("0"):
        return "27" + digits[1:]
    if digits and not digits.startswith("27"):
        return "27" + digits
    return digits


def get_client_ip(request) -> str:
    """Origin of the request; the first X-Forwarded-For hop wins over REMOTE_ADDR."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
        if ip:
            return ip
    return request.META.get("REMOTE_ADDR", "")
