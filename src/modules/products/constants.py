"""Catalog constants."""

from decimal import Decimal

# Smallest currency unit accepted as a unit price.
MIN_PRICE = Decimal("0.01")
