"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``PlaceOrderItemDTO``: a single requested ``(product_id, quantity)`` line.
- ``PlaceOrderDTO``: input for order placement (nested items).
- ``UpdateStatusDTO``: input for a status change.

Repeated product ids are accepted; the Stock Guard sums their demand.
"""

from __future__ import annotations

from typing import Any, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator, model_validator

from modules.orders.constants import OrderStatus


class PlaceOrderItemDTO(BaseModel):
    """Immutable DTO for one requested line.

    Also accepts a ``(product_id, quantity)`` pair.  ``unit_price`` is
    resolved by the Service Layer from the product catalog.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: StrictInt

    @model_validator(mode="before")
    @classmethod
    def accept_pairs(cls, data: Any) -> Any:
        if isinstance(data, (tuple, list)) and len(data) == 2:
            return {"product_id": data[0], "quantity": data[1]}
        return data

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class PlaceOrderDTO(BaseModel):
    """Immutable DTO for order placement requests."""

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    items: List[PlaceOrderItemDTO]
    notes: str = ""

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[PlaceOrderItemDTO]
    ) -> List[PlaceOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v


class UpdateStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    status: OrderStatus
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v
