"""Input validation rules for policy, claim, drop, and profile requests."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from coverdrop_app.core.errors import InvalidInputError

E = TypeVar("E", bound=Enum)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_required_text(value: str, field_name: str) -> str:
    """Validate non-empty text fields and return them trimmed."""
    normalized = (value or "").strip()
    if not normalized:
        raise InvalidInputError(f"{field_name} is required.", field_name)
    return normalized


def validate_choice(enum_type: type[E], value: Any, field_name: str) -> E:
    """Convert a raw value to an enum member or reject it."""
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_type)
        raise InvalidInputError(f"{field_name} must be one of: {allowed}.", field_name) from exc


def validate_positive_amount(value: Decimal, field_name: str) -> Decimal:
    """Validate a strictly positive money amount."""
    amount = Decimal(value)
    if not amount.is_finite() or amount <= 0:
        raise InvalidInputError(f"{field_name} must be positive.", field_name)
    return amount


def validate_purchase_date(purchase_date: date, today: date) -> date:
    """Disallow purchase dates in the future."""
    if purchase_date > today:
        raise InvalidInputError("purchase_date must not be in the future.", "purchase_date")
    return purchase_date


def validate_optional_price(value: Decimal | None) -> Decimal | None:
    """Validate an optional non-negative price."""
    if value is None:
        return None
    price = Decimal(value)
    if not price.is_finite() or price < 0:
        raise InvalidInputError("price must not be negative.", "price")
    return price


def validate_total_supply(total_supply: int) -> int:
    """Validate total token supply."""
    if int(total_supply) < 0:
        raise InvalidInputError("total_supply must not be negative.", "total_supply")
    return int(total_supply)


def validate_time_window(start_time: int, end_time: int | None) -> None:
    """Require the end of a window, when present, to be after its start."""
    if end_time is not None and end_time <= start_time:
        raise InvalidInputError("end_time must be after start_time.", "end_time")


def validate_optional_label(kind_is_other: bool, label: str | None, field_name: str) -> str | None:
    """Require a label for the Other classification and drop it otherwise."""
    if not kind_is_other:
        return None
    return validate_required_text(label or "", field_name)


def validate_email(email: str | None) -> str | None:
    """Validate an optional email address, normalizing blank input to None."""
    if email is None:
        return None
    normalized = email.strip()
    if not normalized:
        return None
    if not EMAIL_PATTERN.match(normalized):
        raise InvalidInputError("email address is not valid.", "email")
    return normalized


def validate_tag_set(values: set[str] | frozenset[str], field_name: str) -> frozenset[str]:
    """Trim token/network identifiers and reject blanks."""
    normalized = frozenset(value.strip() for value in values)
    if "" in normalized:
        raise InvalidInputError(f"{field_name} must not contain blank entries.", field_name)
    return normalized
