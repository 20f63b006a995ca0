from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0")
ONE = Decimal("1")


def d(val) -> Decimal:
    """Coerce incoming values to Decimal safely."""
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def whole_number(val) -> int:
    """Parse 2, "2", 2.0 or Decimal("2.00") as 2; raise ValueError for 2.7, bools and garbage."""
    if isinstance(val, bool) or val is None:
        raise ValueError(f"{val!r} is not a whole number")
    if isinstance(val, int):
        return val
    try:
        parsed = Decimal(str(val).strip())
    except InvalidOperation:
        raise ValueError(f"{val!r} is not a whole number")
    if not parsed.is_finite() or parsed != parsed.to_integral_value():
        raise ValueError(f"{val!r} is not a whole number")
    return int(parsed)


def q2(amount) -> Decimal:
    return d(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def q4(amount) -> Decimal:
    return d(amount).quantize(FOURPLACES, rounding=ROUND_HALF_UP)


def calculate_purchase_service_fee(product_cost, rate, minimum) -> Decimal:
    """Service fee on a purchase: a percentage of the product cost, never below the floor."""
    return q2(max(d(product_cost) * d(rate), d(minimum)))


def calculate_purchase_total(product_cost, delivery_cost, service_fee) -> Optional[Decimal]:
    if product_cost is None or delivery_cost is None or service_fee is None:
        return None
    return q2(d(product_cost) + d(delivery_cost) + d(service_fee))
