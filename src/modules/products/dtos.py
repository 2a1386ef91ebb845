"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

from modules.products.constants import MIN_PRICE


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``sku``, ``name`` and ``category`` are non-empty.
    - ``price`` is at least 0.01 with at most two decimal places.
    - ``stock_quantity`` is non-negative.
    """

    model_config = ConfigDict(frozen=True)

    sku: str
    name: str
    category: str
    price: Decimal
    description: str = ""
    stock_quantity: int = 0

    @field_validator("sku")
    @classmethod
    def sku_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SKU must not be empty.")
        return v.strip().upper()

    @field_validator("name", "category")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be blank.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_valid(cls, v: Decimal) -> Decimal:
        if v < MIN_PRICE:
            raise ValueError(f"Price must be at least {MIN_PRICE}.")
        if v.as_tuple().exponent < -2:
            raise ValueError("Price must have at most two decimal places.")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v
