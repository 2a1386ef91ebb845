"""Order total calculation.

Prices are ``Decimal`` with two places and quantities are integers, so
the products are exact and no rounding step is needed.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Tuple

ZERO = Decimal("0.00")


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return unit_price * quantity


def order_total(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
    """Sum of ``line_total`` over ``(unit_price, quantity)`` pairs."""
    return sum((line_total(price, qty) for price, qty in lines), ZERO)
