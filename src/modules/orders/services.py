"""Order service layer (Use Cases).

Orchestrates order placement and status management.  The service
defines the unit-of-work boundary: every write of a use-case runs in a
single ``transaction.atomic`` block, so a failure at any step leaves
customers, products and orders exactly as they were.

Placement steps:
1. Validate the request (``PlaceOrderDTO``) before touching any store.
2. Resolve the customer, then every product in submission order.
3. Reserve stock for the whole batch (``StockGuard``).
4. Snapshot unit prices and compute totals.
5. Persist order + items, the initial history record and an
   ``OrderPlaced`` outbox event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union
from uuid import UUID

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction
from pydantic import ValidationError as PydanticValidationError

from modules.core.exceptions import InvalidRequest, StorageFailure
from modules.customers.exceptions import CustomerNotFound
from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO, UpdateStatusDTO
from modules.orders.events import OrderPlaced, OrderStatusChanged
from modules.orders.exceptions import InvalidStatusTransition, OrderNotFound
from modules.orders.pricing import order_total
from modules.orders.stock import StockGuard
from modules.products.exceptions import ProductNotFound

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

ItemInput = Union[PlaceOrderItemDTO, Dict[str, Any], tuple]


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).  A custom
    ``StockGuard`` may be injected; by default one is built on the
    product repository.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
        stock_guard: Optional[StockGuard] = None,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._product_repo = product_repository
        self._stock_guard = stock_guard or StockGuard(product_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def place_order(
        self,
        customer_id: Union[str, UUID],
        items: Iterable[ItemInput],
        notes: str = "",
    ) -> Order:
        """Place an order: reserve stock and persist the order atomically.

        ``items`` are ``(product_id, quantity)`` pairs, dicts or
        ``PlaceOrderItemDTO`` instances.  Repeated products become
        separate lines; their demand is checked as a sum.

        Raises:
            InvalidRequest: empty items, non-positive quantity, malformed id.
            CustomerNotFound: the customer does not exist.
            ProductNotFound: the first unknown product id.
            InsufficientStock: a product cannot cover its total demand.
            StorageFailure: the database failed; nothing was kept.
        """
        try:
            dto = PlaceOrderDTO(
                customer_id=customer_id,
                items=[
                    item.model_dump() if isinstance(item, PlaceOrderItemDTO) else item
                    for item in items
                ],
                notes=notes or "",
            )
        except PydanticValidationError as exc:
            logger.info("order.placement_rejected", errors=exc.error_count())
            raise InvalidRequest(_describe(exc)) from exc

        log = logger.bind(customer_id=str(dto.customer_id), line_count=len(dto.items))
        log.info("order.placement_started")

        try:
            order = self._place(dto)
        except DatabaseError as exc:
            log.error("order.placement_storage_failure", error=str(exc))
            raise StorageFailure("Order could not be stored; nothing was kept.") from exc

        log.info(
            "order.placed",
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def _place(self, dto: PlaceOrderDTO) -> Order:
        customer = self._customer_repo.get_by_id(str(dto.customer_id))
        if not customer:
            raise CustomerNotFound(dto.customer_id)

        products = {}
        for item in dto.items:
            if item.product_id in products:
                continue
            product = self._product_repo.get_by_id(str(item.product_id))
            if not product:
                raise ProductNotFound(item.product_id)
            products[item.product_id] = product

        self._stock_guard.reserve((item.product_id, item.quantity) for item in dto.items)

        lines = [
            {
                "product_id": item.product_id,
                "quantity": item.quantity,
                "unit_price": products[item.product_id].price,
            }
            for item in dto.items
        ]
        total = order_total((line["unit_price"], line["quantity"]) for line in lines)

        order = self._order_repo.create(
            {
                "customer_id": customer.id,
                "items": lines,
                "total_amount": total,
                "notes": dto.notes,
            }
        )
        self._order_repo.add_history(
            order_id=order.id,
            status=order.status,
            notes="Order placed",
        )
        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(customer.id),
                total_amount=str(total),
                item_count=len(lines),
            )
        )
        self._order_repo.save(order)
        return order

    def update_status(
        self,
        order_id: Union[str, UUID],
        new_status: str,
        notes: str = "",
    ) -> Order:
        """Set the status of an order.

        The status is overwritten unconditionally unless
        ``ORDER_STRICT_STATUS_TRANSITIONS`` is enabled, in which case
        ``VALID_TRANSITIONS`` is enforced.  The order row is locked
        while the change, its history record and its outbox event are
        written.

        Raises:
            InvalidRequest: unknown status value or malformed order id.
            OrderNotFound: order does not exist.
            InvalidStatusTransition: rejected by the strict table.
            StorageFailure: the database failed; the status is unchanged.
        """
        try:
            dto = UpdateStatusDTO(order_id=order_id, status=new_status, notes=notes or "")
        except PydanticValidationError as exc:
            raise InvalidRequest(_describe(exc)) from exc

        try:
            order = self._update_status(dto)
        except DatabaseError as exc:
            logger.error(
                "order.status_update_storage_failure",
                order_id=str(dto.order_id),
                error=str(exc),
            )
            raise StorageFailure("Order status could not be stored.") from exc
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def _update_status(self, dto: UpdateStatusDTO) -> Order:
        order = self._order_repo.get_for_update(str(dto.order_id))
        if not order:
            raise OrderNotFound(dto.order_id)

        old_status = order.status
        log = logger.bind(
            order_id=str(order.id),
            current_status=old_status,
            new_status=dto.status.value,
        )

        if settings.ORDER_STRICT_STATUS_TRANSITIONS and not order.can_transition_to(
            dto.status
        ):
            log.warning("order.invalid_transition")
            raise InvalidStatusTransition(old_status, dto.status.value)

        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=dto.status.value,
            )
        )
        self._order_repo.update_status(order, dto.status.value)
        self._order_repo.add_history(
            order_id=order.id,
            status=dto.status.value,
            notes=dto.notes,
            old_status=old_status,
        )

        log.info("order.status_updated")
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: Union[str, UUID]) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(order_id)
        return order

    def list_customer_orders(self, customer_id: Union[str, UUID]) -> List[Order]:
        return self._order_repo.list_by_customer(str(customer_id))

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        return self._order_repo.list(filters)


def _describe(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
        for error in exc.errors(include_url=False)
    )
