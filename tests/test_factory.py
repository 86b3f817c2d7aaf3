"""Tests for the engine factory functions."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from orders_domain import (
    CreateOrder,
    OrderCreated,
    OrderShipped,
    ReserveStock,
    ReserveStockOnOrderCreated,
    StockReserved,
)

from ode_domain_engine.adapters.memory import InMemoryEventStore
from ode_domain_engine.cqrs import (
    DomainBroker,
    EventDispatcher,
    TransactionalEventHandler,
)
from ode_domain_engine.domain import DomainEvent
from ode_domain_engine.engine import (
    create_bounded_context_model,
    create_command_engine,
    create_domain_execution_engine,
    create_event_dispatcher,
    create_event_handler,
)
from ode_domain_engine.model import BoundedContextModel
from ode_domain_engine.options import DeliveryMode, DomainOptions
from ode_domain_engine.primitives.exceptions import DomainConfigurationError


def test_create_bounded_context_model() -> None:
    model = create_bounded_context_model("orders")

    assert model.name == "orders"
    assert not model.frozen


def test_domain_execution_engine_is_broker_wired(
    model: BoundedContextModel, store: InMemoryEventStore
) -> None:
    engine = create_domain_execution_engine(model, store)

    assert engine.delivery_mode is DeliveryMode.BROKER


def test_domain_execution_engine_rejects_other_delivery(
    model: BoundedContextModel, store: InMemoryEventStore
) -> None:
    with pytest.raises(DomainConfigurationError):
        create_domain_execution_engine(
            model, store, DomainOptions(delivery=DeliveryMode.DISPATCHER)
        )


class TestCreateCommandEngine:
    def test_plain_engine(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        assert create_command_engine(model, store).delivery_mode is DeliveryMode.NONE

    def test_dispatcher_engine(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        engine = create_command_engine(
            model, store, event_dispatcher=EventDispatcher(model)
        )

        assert engine.delivery_mode is DeliveryMode.DISPATCHER

    def test_broker_engine(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        engine = create_command_engine(model, store, event_broker=DomainBroker(model))

        assert engine.delivery_mode is DeliveryMode.BROKER

    def test_event_handler_engine(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        engine = create_command_engine(
            model, store, event_handler=ReserveStockOnOrderCreated()
        )

        assert engine.delivery_mode is DeliveryMode.EVENT_HANDLER

    def test_options_select_default_strategy(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        engine = create_command_engine(
            model, store, options=DomainOptions(delivery=DeliveryMode.BROKER)
        )

        assert engine.delivery_mode is DeliveryMode.BROKER

    def test_conflicting_collaborators_are_rejected(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        with pytest.raises(DomainConfigurationError, match="event_dispatcher"):
            create_command_engine(
                model,
                store,
                event_dispatcher=EventDispatcher(model),
                event_broker=DomainBroker(model),
            )

    def test_command_handler_requires_event_handler(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        with pytest.raises(DomainConfigurationError):
            create_command_engine(model, store, command_handler=MagicMock())

    def test_collaborator_conflicting_with_options(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        with pytest.raises(DomainConfigurationError):
            create_command_engine(
                model,
                store,
                event_dispatcher=EventDispatcher(model),
                options=DomainOptions(delivery=DeliveryMode.BROKER),
            )

    @pytest.mark.asyncio
    async def test_event_and_command_handler_form_a_broker(
        self, model: BoundedContextModel, store: InMemoryEventStore
    ) -> None:
        async def ship(command: ReserveStock) -> list[DomainEvent]:
            return [OrderShipped(order_id=command.order_id)]

        direct = MagicMock()
        direct.handle = AsyncMock(side_effect=ship)
        engine = create_command_engine(
            model,
            store,
            event_handler=ReserveStockOnOrderCreated(),
            command_handler=direct,
        )

        events = await engine.execute(CreateOrder(order_id=1))

        assert engine.delivery_mode is DeliveryMode.BROKER
        assert [type(e) for e in events] == [OrderCreated, OrderShipped]
        direct.handle.assert_awaited_once()
        assert StockReserved not in [type(e) for e in events]


def test_create_event_handler(
    model: BoundedContextModel, store: InMemoryEventStore
) -> None:
    handler = create_event_handler(model, store)

    assert isinstance(handler, TransactionalEventHandler)
    assert handler.context_key == "orders.event-handlers"


def test_create_event_dispatcher(model: BoundedContextModel) -> None:
    custom = ReserveStockOnOrderCreated()

    assert isinstance(create_event_dispatcher(model), EventDispatcher)
    assert create_event_dispatcher(model, custom).event_handler is custom
