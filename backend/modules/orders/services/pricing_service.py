# backend/modules/orders/services/pricing_service.py

"""
Order pricing rules.

Pure functions over line items exposing ``price`` and ``quantity``
(cart lines or order items). Amounts are Decimals rounded to cents.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

DELIVERY_FEE = Decimal("30.00")
TAX_RATE = Decimal("0.05")
DISCOUNT_THRESHOLD = Decimal("200.00")
DISCOUNT_AMOUNT = Decimal("100.00")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": float(self.subtotal),
            "delivery_fee": float(self.delivery_fee),
            "tax": float(self.tax),
            "discount": float(self.discount),
            "total": float(self.total),
        }


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_subtotal(items: Iterable) -> Decimal:
    subtotal = ZERO
    for item in items:
        subtotal += Decimal(str(item.price)) * item.quantity
    return _money(subtotal)


def calculate_delivery_fee(subtotal: Decimal, has_items: bool) -> Decimal:
    return DELIVERY_FEE if has_items else ZERO


def calculate_tax(subtotal: Decimal) -> Decimal:
    return (subtotal * TAX_RATE).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_discount(subtotal: Decimal) -> Decimal:
    return DISCOUNT_AMOUNT if subtotal >= DISCOUNT_THRESHOLD else ZERO


def calculate_totals(items: Iterable) -> OrderTotals:
    """
    Compute subtotal, delivery fee, tax, discount and total for line items.

    The total is clamped at zero; with the current fixed discount rule it is
    never negative for a non-empty cart.
    """
    items = list(items)
    subtotal = calculate_subtotal(items)
    delivery_fee = calculate_delivery_fee(subtotal, has_items=bool(items))
    tax = calculate_tax(subtotal)
    discount = calculate_discount(subtotal)
    total = max(subtotal + delivery_fee + tax - discount, ZERO)

    return OrderTotals(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        tax=tax,
        discount=discount,
        total=_money(total),
    )
