"""Unit tests for ProductService."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.products.dtos import CreateProductDTO
from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return ProductService(repository=ProductDjangoRepository())


class TestCreateProduct:
    def test_persists_product(self, service):
        product = service.create_product(
            CreateProductDTO(
                sku="kb-01",
                name="Keyboard",
                category="electronics",
                price=Decimal("49.90"),
                stock_quantity=12,
            )
        )
        stored = Product.objects.get(id=product.id)
        assert stored.sku == "KB-01"
        assert stored.stock_quantity == 12

    def test_duplicate_sku(self, service, make_product):
        make_product(sku="KB-01")
        with pytest.raises(ProductAlreadyExists):
            service.create_product(
                CreateProductDTO(
                    sku="kb-01", name="Other", category="x", price=Decimal("1.00")
                )
            )


class TestProductQueries:
    def test_get_product(self, service, make_product):
        product = make_product()
        assert service.get_product(str(product.id)) == product

    def test_get_product_missing(self, service):
        with pytest.raises(ProductNotFound) as exc_info:
            service.get_product(str(uuid4()))
        assert exc_info.value.entity_kind == "Product"

    def test_get_product_by_sku(self, service, make_product):
        product = make_product(sku="ABC-9")
        assert service.get_product_by_sku("abc-9") == product

    def test_get_product_by_sku_missing(self, service):
        with pytest.raises(ProductNotFound):
            service.get_product_by_sku("NOPE")

    def test_search_products_is_case_insensitive_substring(
        self, service, make_product
    ):
        lamp = make_product(name="Desk Lamp")
        make_product(name="Chair")
        assert service.search_products("LAMP") == [lamp]

    def test_list_products_by_category(self, service, make_product):
        tool = make_product(category="Tools")
        make_product(category="food")
        assert service.list_products_by_category("tools") == [tool]
