"""Unit tests for order DTOs."""

from __future__ import annotations

from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.constants import OrderStatus
from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO, UpdateStatusDTO

pytestmark = pytest.mark.unit


class TestPlaceOrderItemDTO:
    def test_valid_item(self):
        pid = uuid4()
        dto = PlaceOrderItemDTO(product_id=pid, quantity=3)
        assert dto.product_id == pid
        assert dto.quantity == 3

    def test_accepts_pair(self):
        pid = uuid4()
        dto = PlaceOrderItemDTO.model_validate((str(pid), 2))
        assert dto.product_id == pid
        assert dto.quantity == 2

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, quantity):
        with pytest.raises(ValidationError):
            PlaceOrderItemDTO(product_id=uuid4(), quantity=quantity)

    @pytest.mark.parametrize("quantity", [1.5, "2", True])
    def test_rejects_non_integer_quantity(self, quantity):
        with pytest.raises(ValidationError):
            PlaceOrderItemDTO(product_id=uuid4(), quantity=quantity)

    def test_rejects_malformed_product_id(self):
        with pytest.raises(ValidationError):
            PlaceOrderItemDTO(product_id="not-a-uuid", quantity=1)

    def test_is_frozen(self):
        dto = PlaceOrderItemDTO(product_id=uuid4(), quantity=1)
        with pytest.raises(ValidationError):
            dto.quantity = 5


class TestPlaceOrderDTO:
    def test_rejects_empty_items(self):
        with pytest.raises(ValidationError, match="at least one item"):
            PlaceOrderDTO(customer_id=uuid4(), items=[])

    def test_allows_repeated_products(self):
        pid = uuid4()
        dto = PlaceOrderDTO(customer_id=uuid4(), items=[(pid, 3), (pid, 4)])
        assert [item.quantity for item in dto.items] == [3, 4]

    def test_notes_default_empty(self):
        dto = PlaceOrderDTO(customer_id=uuid4(), items=[(uuid4(), 1)])
        assert dto.notes == ""


class TestUpdateStatusDTO:
    def test_normalises_status_case(self):
        dto = UpdateStatusDTO(order_id=uuid4(), status=" shipped ")
        assert dto.status == OrderStatus.SHIPPED

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            UpdateStatusDTO(order_id=uuid4(), status="LOST")
