"""Stock concurrency integration tests.

Proves that concurrent placements never oversell and that every loser
sees ``InsufficientStock`` rather than a storage error.

Scenarios:
- Product with **stock = 1**, two threads released together by a
  barrier: exactly one succeeds, the other gets ``InsufficientStock``.
- Product "Gamer PC" with **stock = 5**, 10 threads buying 1 unit each:
  exactly 5 succeed, final stock is 0 (never negative).

Uses ``TransactionTestCase`` so each thread can see committed data.  On
SQLite the test database is a file (``config.settings_test``) and
transactions begin ``IMMEDIATE``, so writers queue instead of failing.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

import structlog
from django.db import connections
from django.test import TransactionTestCase

from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.exceptions import InsufficientStock
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = structlog.get_logger(__name__)

INITIAL_STOCK = 5
NUM_WORKERS = 10


def _service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


class ConcurrentPlacementMixin:
    def _place_order_in_thread(self, thread_id: int, barrier=None) -> str:
        try:
            if barrier is not None:
                barrier.wait(timeout=10)
            _service().place_order(
                self.customer.id,
                [(self.product.id, 1)],
                notes=f"Concurrency thread {thread_id}",
            )
            logger.info("concurrency.thread.placed", thread_id=thread_id)
            return "success"
        except InsufficientStock:
            logger.info("concurrency.thread.insufficient", thread_id=thread_id)
            return "insufficient"
        finally:
            connections.close_all()

    def _run_workers(self, workers: int, barrier=None) -> list[str]:
        results = []
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self._place_order_in_thread, i, barrier)
                for i in range(workers)
            ]
            for future in as_completed(futures):
                results.append(future.result())
        return results


class TestLastUnitRace(ConcurrentPlacementMixin, TransactionTestCase):
    """Two placements race for the last unit."""

    def setUp(self):
        self.customer = Customer.objects.create(
            first_name="Race", last_name="Customer", email="race@example.com"
        )
        self.product = Product.objects.create(
            sku="LAST-UNIT",
            name="Last Unit",
            price=Decimal("10.00"),
            stock_quantity=1,
        )

    def test_one_wins_and_the_other_gets_insufficient_stock(self):
        for _ in range(3):
            Product.objects.filter(id=self.product.id).update(stock_quantity=1)

            results = self._run_workers(2, barrier=threading.Barrier(2))

            self.assertEqual(sorted(results), ["insufficient", "success"])
            self.product.refresh_from_db()
            self.assertEqual(self.product.stock_quantity, 0)

        self.assertEqual(Order.objects.count(), 3)


class TestStockConcurrency(ConcurrentPlacementMixin, TransactionTestCase):
    """Prove atomic stock reservation under concurrent load."""

    def setUp(self):
        self.customer = Customer.objects.create(
            first_name="Concurrency",
            last_name="Customer",
            email="concurrency@example.com",
        )
        self.product = Product.objects.create(
            sku="GAMER-PC",
            name="Gamer PC",
            price=Decimal("2999.99"),
            stock_quantity=INITIAL_STOCK,
        )

    def test_concurrent_orders_exhaust_stock(self):
        """10 threads buy 1 unit from stock=5: exactly 5 succeed."""
        results = self._run_workers(NUM_WORKERS)

        self.assertEqual(results.count("success"), INITIAL_STOCK)
        self.assertEqual(results.count("insufficient"), NUM_WORKERS - INITIAL_STOCK)
        self.assertEqual(Order.objects.count(), INITIAL_STOCK)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)

    def test_conservation_of_stock(self):
        """initial = sold + remaining, and remaining is never negative."""
        results = self._run_workers(NUM_WORKERS)

        self.product.refresh_from_db()
        remaining = self.product.stock_quantity
        self.assertGreaterEqual(remaining, 0)
        self.assertEqual(INITIAL_STOCK, results.count("success") + remaining)
