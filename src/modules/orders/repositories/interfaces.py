"""Order repository interface.

Extends ``IRepository[Order]`` with methods required by the Order
aggregate: creation together with its items, row locking for status
changes, and status history tracking.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items in one atomic write.

        ``data`` must include ``customer_id``, ``total_amount`` and
        ``items`` (ordered list of dicts with ``product_id``, ``quantity``,
        ``unit_price``); ``notes`` is optional.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched items and status history."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order holding a row-level lock."""

    @abstractmethod
    def list_by_customer(self, customer_id: str) -> List[Order]:
        """Orders of one customer, newest first; empty for unknown ids."""

    @abstractmethod
    def update_status(self, order: Order, status: str) -> Order:
        """Overwrite the order status and flush its pending events."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
