"""Factory functions for the common engine wirings.

**Example**
    ```python
    model = create_bounded_context_model("orders")
    model.register_command_handler(CreateOrder, CreateOrderHandler)
    model.register_event_handler(OrderCreated, ReserveStockOnOrderCreated)

    engine = create_domain_execution_engine(model, InMemoryEventStore())
    events = await engine.execute(CreateOrder(order_id=1))
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..cqrs.broker import DomainBroker
from ..cqrs.event_dispatcher import EventDispatcher
from ..cqrs.transactional import TransactionalEventHandler
from ..model.bounded_context import BoundedContextModel
from ..options import DeliveryMode, DomainOptions
from ..primitives.exceptions import DomainConfigurationError
from .delivery import (
    BrokerDelivery,
    DeliveryStrategy,
    DispatcherDelivery,
    EventHandlerDelivery,
    NoDelivery,
)
from .engine import DomainEngine

if TYPE_CHECKING:
    from ..ports.event_queue import IEventQueueWriter
    from ..ports.event_store import IEventStore
    from ..ports.handlers import (
        ICommandHandler,
        IEventBroker,
        IEventDispatcher,
        IEventHandler,
    )


def create_bounded_context_model(name: str) -> BoundedContextModel:
    """Create an empty, open model for the bounded context *name*."""
    return BoundedContextModel(name)


def create_domain_execution_engine(
    model: BoundedContextModel,
    store: IEventStore,
    options: DomainOptions | None = None,
    *,
    event_queue_writer: IEventQueueWriter | None = None,
) -> DomainEngine:
    """Create an engine that executes the full command/event cascade.

    Events are delivered through a :class:`DomainBroker` over the model, so
    every command raised by an event handler is executed in the same
    transaction.
    """
    options = options or DomainOptions.defaults()
    if options.delivery not in (DeliveryMode.NONE, DeliveryMode.BROKER):
        msg = (
            "create_domain_execution_engine always cascades through a broker, "
            f"options select {options.delivery.value}"
        )
        raise DomainConfigurationError(msg)
    options = options.model_copy(update={"delivery": DeliveryMode.BROKER})
    return DomainEngine(
        model,
        store,
        options,
        event_queue_writer=event_queue_writer,
    )


def create_command_engine(
    model: BoundedContextModel,
    store: IEventStore,
    *,
    event_dispatcher: IEventDispatcher | None = None,
    event_broker: IEventBroker | None = None,
    event_handler: IEventHandler | None = None,
    command_handler: ICommandHandler | None = None,
    options: DomainOptions | None = None,
) -> DomainEngine:
    """Create an engine wired with at most one delivery collaborator.

    - nothing: events are persisted and returned only
    - *event_dispatcher*: one-way dispatch after commit
    - *event_broker*: two-way, raised commands are executed
    - *event_handler*: one-way, in transaction
    - *event_handler* + *command_handler*: a broker over *event_handler*
      whose raised commands go straight to *command_handler*

    Any other combination raises ``DomainConfigurationError``.
    """
    options = options or DomainOptions.defaults()
    delivery = _delivery_for(
        model,
        options,
        event_dispatcher=event_dispatcher,
        event_broker=event_broker,
        event_handler=event_handler,
        command_handler=command_handler,
    )
    return DomainEngine(model, store, options, delivery=delivery)


def create_event_handler(
    model: BoundedContextModel,
    store: IEventStore,
    *,
    cache_runtime_model: bool = False,
) -> TransactionalEventHandler:
    """Create an idempotent handler for events delivered from outside."""
    return TransactionalEventHandler(
        model, store, cache_runtime_model=cache_runtime_model
    )


def create_event_dispatcher(
    model: BoundedContextModel,
    event_handler: IEventHandler | None = None,
) -> EventDispatcher:
    """Create a one-way dispatcher over *model* (or over *event_handler*)."""
    return EventDispatcher(model, event_handler)


def _delivery_for(
    model: BoundedContextModel,
    options: DomainOptions,
    *,
    event_dispatcher: IEventDispatcher | None,
    event_broker: IEventBroker | None,
    event_handler: IEventHandler | None,
    command_handler: ICommandHandler | None,
) -> DeliveryStrategy | None:
    supplied = [
        name
        for name, value in (
            ("event_dispatcher", event_dispatcher),
            ("event_broker", event_broker),
            ("event_handler", event_handler),
        )
        if value is not None
    ]
    if len(supplied) > 1:
        msg = f"Only one delivery collaborator may be given, got {', '.join(supplied)}"
        raise DomainConfigurationError(msg)
    if command_handler is not None and event_handler is None:
        msg = "command_handler requires an event_handler to broker for"
        raise DomainConfigurationError(msg)

    if event_dispatcher is not None:
        return DispatcherDelivery(event_dispatcher)
    if event_broker is not None:
        return BrokerDelivery(event_broker)
    if event_handler is not None:
        if command_handler is not None:
            return BrokerDelivery(
                DomainBroker(
                    model,
                    event_handler,
                    command_handler,
                    failure_policy=options.failure_policy,
                )
            )
        return EventHandlerDelivery(
            EventDispatcher(
                model,
                event_handler,
                failure_policy=options.failure_policy,
            )
        )
    if options.delivery is DeliveryMode.NONE:
        return NoDelivery()
    # Let the engine build the default strategy the options name.
    return None
