from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ..core.constants import CURRENCY_SYMBOL
from ..core.exceptions import ValidationError

ZERO = Decimal("0")
CENT = Decimal("0.01")
_WHOLE = Decimal("1")


def to_money(value: Any, field_name: str = "amount") -> Decimal:
    """Coerce user or driver input into a finite Decimal with at most two decimals.

    The stores keep DECIMAL(12, 2); finer amounts are rejected rather than
    rounded differently by each backing.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} is not a valid amount")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a finite number")
    try:
        whole_cents = amount == amount.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(f"{field_name} is too large")
    if not whole_cents:
        raise ValidationError(f"{field_name} cannot have more than 2 decimal places")
    return amount


def round_currency(value: Decimal) -> Decimal:
    """Round half-up to whole currency units."""
    return value.quantize(_WHOLE, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{value:,}"
