"""Stock Guard: all-or-nothing inventory reservation for one order.

Reservation happens in two phases:

1. **Validate** a single stock snapshot for every product of the batch.
   Nothing is written unless every product covers its demand.
2. **Apply** conditional decrements inside a savepoint, in ascending
   product-id order.  A decrement that matches no row means another
   order consumed the stock after the snapshot was read; the savepoint
   is rolled back and the batch is validated again.

The guard never holds locks in Python; the conditional ``UPDATE`` is
the only arbiter between concurrent orders.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Tuple
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction

from modules.orders.exceptions import InsufficientStock

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockReservation:
    """Decrements applied by a successful ``StockGuard.reserve``."""

    lines: Tuple[Tuple[UUID, int], ...]

    @property
    def total_units(self) -> int:
        return sum(quantity for _, quantity in self.lines)


class _ReservationConflict(Exception):
    """A conditional decrement lost against a concurrent order."""

    def __init__(self, product_id: UUID) -> None:
        self.product_id = product_id
        super().__init__(f"Stock for product {product_id} changed during reservation.")


class StockGuard:
    def __init__(
        self,
        product_repository: IProductRepository,
        max_attempts: Optional[int] = None,
    ) -> None:
        self._repo = product_repository
        self._max_attempts = max_attempts or settings.STOCK_RESERVATION_MAX_ATTEMPTS

    def reserve(self, lines: Iterable[Tuple[UUID, int]]) -> StockReservation:
        """Reserve stock for every ``(product_id, quantity)`` line.

        Quantities of repeated product ids are summed before checking.

        Raises:
            InsufficientStock: a product cannot cover its total demand,
                either on the snapshot or after every retry was lost.
        """
        demand = self.aggregate(lines)
        contested: Optional[UUID] = None

        for attempt in range(1, self._max_attempts + 1):
            self._validate(demand)
            try:
                with transaction.atomic():
                    self._apply(demand)
            except _ReservationConflict as exc:
                contested = exc.product_id
                logger.warning(
                    "stock.reservation_conflict",
                    product_id=str(contested),
                    attempt=attempt,
                )
                continue

            logger.info(
                "stock.reserved",
                products=len(demand),
                attempts=attempt,
            )
            return StockReservation(lines=tuple(demand.items()))

        available = self._repo.get_stock_levels([contested]).get(contested, 0)
        logger.warning(
            "stock.reservation_exhausted",
            product_id=str(contested),
            attempts=self._max_attempts,
        )
        raise InsufficientStock(
            contested, demand[contested], available, contended=True
        )

    @staticmethod
    def aggregate(lines: Iterable[Tuple[UUID, int]]) -> Dict[UUID, int]:
        """Sum quantities per product id, keeping first-seen order."""
        demand: Dict[UUID, int] = OrderedDict()
        for product_id, quantity in lines:
            key = UUID(str(product_id))
            demand[key] = demand.get(key, 0) + quantity
        return demand

    def _validate(self, demand: Dict[UUID, int]) -> None:
        levels = self._repo.get_stock_levels(demand.keys())
        for product_id, requested in demand.items():
            available = levels.get(product_id, 0)
            if available < requested:
                logger.info(
                    "stock.insufficient",
                    product_id=str(product_id),
                    requested=requested,
                    available=available,
                )
                raise InsufficientStock(product_id, requested, available)

    def _apply(self, demand: Dict[UUID, int]) -> None:
        for product_id in sorted(demand):
            if not self._repo.conditional_decrement(product_id, demand[product_id]):
                raise _ReservationConflict(product_id)
