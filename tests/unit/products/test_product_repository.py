"""Unit tests for ProductDjangoRepository stock primitives."""

from __future__ import annotations

from uuid import uuid4

import pytest
from django.db import IntegrityError

from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return ProductDjangoRepository()


class TestStockLevels:
    def test_single_query_snapshot(self, repo, make_product, django_assert_num_queries):
        a = make_product(stock_quantity=3)
        b = make_product(stock_quantity=0)
        with django_assert_num_queries(1):
            levels = repo.get_stock_levels([a.id, b.id, uuid4()])
        assert levels == {a.id: 3, b.id: 0}


class TestConditionalDecrement:
    def test_decrements_when_enough(self, repo, make_product):
        product = make_product(stock_quantity=5)
        assert repo.conditional_decrement(product.id, 5) is True
        product.refresh_from_db()
        assert product.stock_quantity == 0

    def test_refuses_when_short(self, repo, make_product):
        product = make_product(stock_quantity=2)
        assert repo.conditional_decrement(product.id, 3) is False
        product.refresh_from_db()
        assert product.stock_quantity == 2

    def test_unknown_product(self, repo):
        assert repo.conditional_decrement(uuid4(), 1) is False


class TestConstraints:
    def test_stock_cannot_go_negative_in_db(self, make_product):
        product = make_product(stock_quantity=1)
        with pytest.raises(IntegrityError):
            Product.objects.filter(id=product.id).update(stock_quantity=-1)

    def test_lookups_return_none_for_bad_ids(self, repo):
        assert repo.get_by_id("nope") is None
        assert repo.get_by_sku("missing") is None
