"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` so the
Order aggregate (Order + OrderItems) is persisted atomically.  When
called inside the service transaction the blocks become savepoints.

Pending domain events of the aggregate are written to the outbox in
the same transaction as the row they describe.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.core.models import OutboxEvent
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.pricing import line_total
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            customer_id=data["customer_id"],
            total_amount=data["total_amount"],
            notes=data.get("notes", ""),
        )
        order.save()

        items = [
            OrderItem(
                order=order,
                product_id=item["product_id"],
                position=position,
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                total_price=line_total(item["unit_price"], item["quantity"]),
            )
            for position, item in enumerate(data["items"], start=1)
        ]
        OrderItem.objects.bulk_create(items)

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Uses ``select_related`` for the customer FK and
        ``prefetch_related`` for items and status history, so
        serialising the aggregate costs a fixed number of queries.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return (
                Order.objects.select_related("customer")
                .prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.  Returns ``None`` for
        non-existent or malformed IDs.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional ORM look-ups and eager-loaded relations."""
        queryset = Order.objects.select_related("customer").prefetch_related(
            "items", "status_history"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_by_customer(self, customer_id: str) -> List[Order]:
        try:
            return self.list({"customer_id": customer_id})
        except (ValueError, ValidationError):
            return []

    # ------------------------------------------------------------------
    # Save / status (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order, update_fields: Optional[Sequence[str]] = None) -> Order:
        """Persist the order and write its pending events to the outbox."""
        entity.save(update_fields=update_fields)
        events = self._flush_events(entity)
        logger.info("order.saved", order_id=str(entity.id), event_count=events)
        return entity

    @transaction.atomic
    def update_status(self, order: Order, status: str) -> Order:
        order.status = status
        return self.save(order, update_fields=["status"])

    @transaction.atomic
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    # ------------------------------------------------------------------
    # Outbox
    # ------------------------------------------------------------------

    @staticmethod
    def _flush_events(entity: Order) -> int:
        events = entity.domain_events
        OutboxEvent.objects.bulk_create(
            [OutboxEvent.from_domain_event(event, OUTBOX_TOPIC) for event in events]
        )
        entity.clear_domain_events()
        return len(events)
