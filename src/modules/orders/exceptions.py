"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Any

from modules.core.exceptions import DomainError, NotFound, StorageFailure


class OrderNotFound(NotFound):
    """The requested order does not exist."""

    entity_kind = "Order"


class InsufficientStock(DomainError):
    """A product cannot cover the demanded quantity.

    ``requested`` is the total demand for the product across every line
    of the order; ``available`` is the stock seen when the check failed.
    ``contended`` is set when every reservation attempt lost against
    concurrent orders; ``available`` is then the stock read afterwards
    and may exceed ``requested``.
    """

    def __init__(
        self,
        product_id: Any,
        requested: int,
        available: int,
        contended: bool = False,
    ) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.contended = contended
        if contended:
            message = (
                f"Stock for product {product_id} was contended by concurrent "
                f"orders: requested {requested}, {available} left afterwards."
            )
        else:
            message = (
                f"Insufficient stock for product {product_id}: "
                f"requested {requested}, available {available}."
            )
        super().__init__(message)


class InvalidStatusTransition(DomainError):
    """The status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current} to {requested}.")


class OrderNumberUnavailable(StorageFailure):
    """No unused order number was found within the retry budget."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f"Failed to generate a unique order number after {attempts} attempts."
        )
