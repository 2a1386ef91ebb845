"""Unit tests for the Stock Guard.

Covers:
- All-or-nothing validation against one stock snapshot.
- Duplicate product lines summed before checking.
- Conditional decrements losing a race: savepoint rollback and retry.
- Retry exhaustion surfaces as ``InsufficientStock``.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.exceptions import InsufficientStock
from modules.orders.stock import StockGuard, StockReservation
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return ProductDjangoRepository()


@pytest.fixture()
def guard(repo):
    return StockGuard(repo)


def _stock(product: Product) -> int:
    product.refresh_from_db()
    return product.stock_quantity


class TestAggregate:
    def test_sums_duplicates_in_first_seen_order(self):
        a, b = uuid4(), uuid4()
        demand = StockGuard.aggregate([(b, 1), (a, 2), (b, 4)])
        assert list(demand.items()) == [(b, 5), (a, 2)]

    def test_normalises_string_ids(self):
        a = uuid4()
        demand = StockGuard.aggregate([(str(a), 1), (a, 1)])
        assert demand == {a: 2}


class TestReserve:
    def test_decrements_every_product(self, guard, make_product):
        p1 = make_product(stock_quantity=5)
        p2 = make_product(stock_quantity=8)

        reservation = guard.reserve([(p1.id, 2), (p2.id, 8)])

        assert isinstance(reservation, StockReservation)
        assert reservation.lines == ((p1.id, 2), (p2.id, 8))
        assert reservation.total_units == 10
        assert _stock(p1) == 3
        assert _stock(p2) == 0

    def test_exact_stock_is_enough(self, guard, make_product):
        product = make_product(stock_quantity=4)
        guard.reserve([(product.id, 4)])
        assert _stock(product) == 0

    def test_insufficient_product_leaves_all_untouched(self, guard, make_product):
        p1 = make_product(stock_quantity=5)
        p2 = make_product(stock_quantity=1)

        with pytest.raises(InsufficientStock) as exc_info:
            guard.reserve([(p1.id, 2), (p2.id, 3)])

        assert exc_info.value.product_id == p2.id
        assert exc_info.value.requested == 3
        assert exc_info.value.available == 1
        assert exc_info.value.contended is False
        assert _stock(p1) == 5
        assert _stock(p2) == 1

    def test_duplicate_lines_checked_as_sum(self, guard, make_product):
        product = make_product(stock_quantity=5)

        with pytest.raises(InsufficientStock) as exc_info:
            guard.reserve([(product.id, 3), (product.id, 4)])

        assert exc_info.value.requested == 7
        assert exc_info.value.available == 5
        assert _stock(product) == 5

    def test_duplicate_lines_within_stock_decrement_once_by_sum(
        self, guard, make_product
    ):
        product = make_product(stock_quantity=5)
        reservation = guard.reserve([(product.id, 2), (product.id, 3)])
        assert reservation.lines == ((product.id, 5),)
        assert _stock(product) == 0

    def test_first_failing_product_in_submission_order_is_reported(
        self, guard, make_product
    ):
        p1 = make_product(stock_quantity=0)
        p2 = make_product(stock_quantity=0)

        with pytest.raises(InsufficientStock) as exc_info:
            guard.reserve([(p2.id, 1), (p1.id, 1)])

        assert exc_info.value.product_id == p2.id


class TestConcurrentLoss:
    """Simulate another order consuming stock after the snapshot was read."""

    def test_lost_decrement_rolls_back_applied_ones_and_revalidates(
        self, repo, make_product, monkeypatch
    ):
        first = make_product(stock_quantity=5)
        second = make_product(stock_quantity=5)
        low, high = sorted([first, second], key=lambda p: p.id)
        # A competing order already took every unit of ``high``.
        Product.objects.filter(id=high.id).update(stock_quantity=0)

        original = repo.get_stock_levels
        snapshots = {"n": 0}

        def stale_then_fresh(ids):
            snapshots["n"] += 1
            if snapshots["n"] == 1:
                return {low.id: 5, high.id: 5}
            return original(ids)

        monkeypatch.setattr(repo, "get_stock_levels", stale_then_fresh)
        guard = StockGuard(repo, max_attempts=3)

        with pytest.raises(InsufficientStock) as exc_info:
            guard.reserve([(low.id, 1), (high.id, 1)])

        assert exc_info.value.product_id == high.id
        assert exc_info.value.available == 0
        assert snapshots["n"] == 2
        # The decrement applied to ``low`` in the lost round was rolled back.
        assert _stock(low) == 5
        assert _stock(high) == 0

    def test_retry_succeeds_when_stock_still_covers_demand(
        self, repo, make_product, monkeypatch
    ):
        product = make_product(stock_quantity=5)
        original = repo.conditional_decrement
        calls = {"n": 0}

        def loses_first_round(product_id, amount):
            calls["n"] += 1
            if calls["n"] == 1:
                return False
            return original(product_id, amount)

        monkeypatch.setattr(repo, "conditional_decrement", loses_first_round)
        guard = StockGuard(repo, max_attempts=3)

        reservation = guard.reserve([(product.id, 2)])

        assert calls["n"] == 2
        assert reservation.lines == ((product.id, 2),)
        assert _stock(product) == 3

    def test_exhausted_retries_raise_insufficient_stock(
        self, repo, make_product, monkeypatch
    ):
        product = make_product(stock_quantity=5)
        monkeypatch.setattr(repo, "conditional_decrement", lambda *_: False)
        guard = StockGuard(repo, max_attempts=2)

        with pytest.raises(InsufficientStock) as exc_info:
            guard.reserve([(product.id, 1)])

        assert exc_info.value.product_id == product.id
        assert exc_info.value.requested == 1
        assert exc_info.value.available == 5
        assert exc_info.value.contended is True
        assert "contended" in str(exc_info.value)
        assert _stock(product) == 5

    def test_max_attempts_defaults_to_setting(self, repo, settings):
        settings.STOCK_RESERVATION_MAX_ATTEMPTS = 7
        assert StockGuard(repo)._max_attempts == 7
