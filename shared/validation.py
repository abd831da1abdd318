"""Field validators shared by the user and offer handlers."""

import re
from typing import Any, Mapping

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(phone))


def is_valid_price(price: Any) -> bool:
    return isinstance(price, (int, float)) and not isinstance(price, bool) and price > 0


def is_valid_string(value: Any, min_length: int = 1) -> bool:
    return isinstance(value, str) and len(value.strip()) >= min_length


def validate_required_fields(data: Mapping[str, Any], required_fields: list[str]) -> list[str]:
    """Return one error message per falsy or missing field."""
    return [f"{field} is required" for field in required_fields if not data.get(field)]
