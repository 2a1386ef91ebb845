"""Domain events for the Orders bounded context.

Every field beyond the base ones carries a default so the events stay
valid dataclass subclasses of ``DomainEvent``.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when an order and its items have been persisted."""

    order_number: str = ""
    customer_id: str = ""
    total_amount: str = "0.00"
    item_count: int = 0


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order status changes."""

    old_status: str = ""
    new_status: str = ""
