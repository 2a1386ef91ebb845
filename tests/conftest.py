from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; never leak them between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def make_customer():
    counter = {"n": 0}

    def _make(**overrides) -> Customer:
        counter["n"] += 1
        fields = {
            "first_name": "Ada",
            "last_name": f"Lovelace {counter['n']}",
            "email": f"ada{counter['n']}@example.com",
            "city": "London",
            "country": "GB",
        }
        fields.update(overrides)
        return Customer.objects.create(**fields)

    return _make


@pytest.fixture()
def make_product():
    counter = {"n": 0}

    def _make(**overrides) -> Product:
        counter["n"] += 1
        fields = {
            "sku": f"SKU-{counter['n']:04d}",
            "name": f"Product {counter['n']}",
            "category": "general",
            "price": Decimal("10.00"),
            "stock_quantity": 10,
        }
        fields.update(overrides)
        return Product.objects.create(**fields)

    return _make


@pytest.fixture()
def customer(make_customer):
    return make_customer(email="customer@example.com")


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )
