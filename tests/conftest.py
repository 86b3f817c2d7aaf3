"""Shared fixtures for the engine tests."""

from __future__ import annotations

import pytest
from orders_domain import (
    CreateOrder,
    CreateOrderHandler,
    OrderCreated,
    Ping,
    PingAgainOnPinged,
    Pinged,
    PingHandler,
    ReserveStock,
    ReserveStockHandler,
    ReserveStockOnOrderCreated,
)

from ode_domain_engine.adapters.memory import (
    InMemoryEventQueueWriter,
    InMemoryEventStore,
)
from ode_domain_engine.model import BoundedContextModel


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def queue() -> InMemoryEventQueueWriter:
    return InMemoryEventQueueWriter()


@pytest.fixture
def model() -> BoundedContextModel:
    """Orders context: CreateOrder -> OrderCreated -> ReserveStock -> StockReserved."""
    m = BoundedContextModel("orders")
    m.register_command_handler(CreateOrder, CreateOrderHandler)
    m.register_command_handler(ReserveStock, ReserveStockHandler)
    m.register_event_handler(OrderCreated, ReserveStockOnOrderCreated)
    return m


@pytest.fixture
def ping_model() -> BoundedContextModel:
    """A context whose cascade never ends on its own."""
    m = BoundedContextModel("ping")
    m.register_command_handler(Ping, PingHandler)
    m.register_event_handler(Pinged, PingAgainOnPinged)
    return m
