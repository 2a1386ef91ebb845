"""Unit tests for domain event primitives and the in-memory bus."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.events import OrderPlaced, OrderStatusChanged
from modules.orders.models import Order
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


def test_order_registers_and_clears_domain_events():
    order = Order(
        customer_id=uuid4(),
        order_number="ORD-20260101-000001",
        status=OrderStatus.PENDING,
        total_amount=Decimal("0.00"),
    )

    assert order.domain_events == []

    event = OrderPlaced(aggregate_id=order.id)
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderPlaced"

    order.clear_domain_events()
    assert order.domain_events == []


def test_events_are_immutable():
    event = OrderStatusChanged(aggregate_id=uuid4(), new_status="SHIPPED")
    with pytest.raises(FrozenInstanceError):
        event.new_status = "DELIVERED"


def test_payload_is_json_safe_and_rebuildable():
    event = OrderPlaced(
        aggregate_id=uuid4(),
        order_number="ORD-20260101-ABCDEF",
        customer_id=str(uuid4()),
        total_amount="20.00",
        item_count=2,
    )

    payload = event.to_payload()
    assert isinstance(payload["aggregate_id"], str)
    assert isinstance(payload["occurred_on"], str)

    rebuilt = DomainEvent.from_payload("OrderPlaced", payload)

    assert isinstance(rebuilt, OrderPlaced)
    assert isinstance(rebuilt.aggregate_id, UUID)
    assert isinstance(rebuilt.occurred_on, datetime)
    assert rebuilt == event


def test_from_payload_unknown_type():
    with pytest.raises(KeyError):
        DomainEvent.from_payload("NoSuchEvent", {"aggregate_id": str(uuid4())})


class TestInMemoryEventBus:
    def test_publish_routes_by_event_class(self):
        bus = InMemoryEventBus()
        placed, changed = [], []

        class Collect:
            def __init__(self, sink):
                self.sink = sink

            def handle(self, event):
                self.sink.append(event)

        bus.subscribe(OrderPlaced, Collect(placed))
        bus.subscribe(OrderStatusChanged, Collect(changed))

        event = OrderPlaced(aggregate_id=uuid4())
        bus.publish(event)

        assert placed == [event]
        assert changed == []

    def test_subscribe_is_idempotent(self):
        bus = InMemoryEventBus()

        class Handler:
            def handle(self, event):
                pass

        handler = Handler()
        bus.subscribe(OrderPlaced, handler)
        bus.subscribe(OrderPlaced, handler)
        assert bus.handlers_for(OrderPlaced) == [handler]

    def test_handler_errors_propagate(self):
        bus = InMemoryEventBus()

        class Broken:
            def handle(self, event):
                raise ValueError("nope")

        bus.subscribe(OrderPlaced, Broken())
        with pytest.raises(ValueError):
            bus.publish(OrderPlaced(aggregate_id=uuid4()))
