"""Delivery strategies — where the engine sends the events a command produced.

Exactly one strategy is active per engine. The engine's cascade loop only
talks to :class:`DeliveryStrategy`, so it does not change with the strategy.

- ``NoDelivery``: events are persisted and returned only.
- ``DispatcherDelivery``: one-way, after the commit point.
- ``EventHandlerDelivery``: one-way, inside the transaction.
- ``BrokerDelivery``: two-way, inside the transaction; raised commands are
  executed as part of the cascade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import partial
from typing import TYPE_CHECKING, Any, ClassVar

from ..cqrs.broker import DomainBroker
from ..cqrs.event_dispatcher import EventDispatcher
from ..options import DeliveryMode

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ..context import ExecutionContext
    from ..domain.commands import Command
    from ..domain.events import DomainEvent
    from ..model.bounded_context import BoundedContextModel
    from ..options import DomainOptions
    from ..ports.handlers import ICommandHandler, IEventBroker, IEventDispatcher


class DeliveryStrategy(ABC):
    """Delivers one command's events; returns the commands to run next."""

    mode: ClassVar[DeliveryMode]

    @abstractmethod
    async def deliver(
        self, events: Sequence[DomainEvent], context: ExecutionContext
    ) -> list[Command]:
        ...

    def command_handler_for(self, command: Command) -> ICommandHandler | None:
        """Handler that overrides the model lookup for a raised command."""
        return None


class NoDelivery(DeliveryStrategy):
    mode = DeliveryMode.NONE

    async def deliver(
        self, events: Sequence[DomainEvent], context: ExecutionContext
    ) -> list[Command]:
        return []


class DispatcherDelivery(DeliveryStrategy):
    """One-way dispatch after the commit point.

    Events are handed to the dispatcher once the cascade's events are
    persisted, still within the ``execute`` call. A dispatch failure
    surfaces to the caller but cannot undo the persisted events.
    """

    mode = DeliveryMode.DISPATCHER

    def __init__(self, dispatcher: IEventDispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> IEventDispatcher:
        return self._dispatcher

    async def deliver(
        self, events: Sequence[DomainEvent], context: ExecutionContext
    ) -> list[Command]:
        if events:
            context.defer(partial(self._dispatch, list(events)))
        return []

    async def _dispatch(self, events: list[DomainEvent]) -> None:
        for event in events:
            await self._dispatcher.dispatch(event)


class EventHandlerDelivery(DeliveryStrategy):
    """One-way delivery to a directly supplied event handler, in transaction.

    A fail-fast handler failure rolls the whole cascade back. Commands the
    handler raises are its own responsibility.
    """

    mode = DeliveryMode.EVENT_HANDLER

    def __init__(self, dispatcher: IEventDispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> IEventDispatcher:
        return self._dispatcher

    async def deliver(
        self, events: Sequence[DomainEvent], context: ExecutionContext
    ) -> list[Command]:
        for event in events:
            await self._dispatcher.dispatch(event)
        return []


class BrokerDelivery(DeliveryStrategy):
    """Two-way delivery; raised commands join the running cascade."""

    mode = DeliveryMode.BROKER

    def __init__(self, broker: IEventBroker) -> None:
        self._broker = broker

    @property
    def broker(self) -> IEventBroker:
        return self._broker

    async def deliver(
        self, events: Sequence[DomainEvent], context: ExecutionContext
    ) -> list[Command]:
        if not events:
            return []
        return list(await self._broker.broker(events))

    def command_handler_for(self, command: Command) -> ICommandHandler | None:
        # Optional on custom brokers; only broker(events) is required.
        handler: ICommandHandler | None = getattr(
            self._broker, "command_handler", None
        )
        return handler


def build_delivery(
    model: BoundedContextModel,
    options: DomainOptions,
    handler_factory: Callable[[type[Any]], Any] | None = None,
) -> DeliveryStrategy:
    """Build the default strategy for ``options.delivery``."""
    shared: dict[str, Any] = {
        "failure_policy": options.failure_policy,
        "cache_runtime_model": options.cache_runtime_model,
        "handler_factory": handler_factory,
    }
    if options.delivery is DeliveryMode.BROKER:
        return BrokerDelivery(DomainBroker(model, **shared))
    if options.delivery is DeliveryMode.DISPATCHER:
        return DispatcherDelivery(EventDispatcher(model, **shared))
    if options.delivery is DeliveryMode.EVENT_HANDLER:
        return EventHandlerDelivery(EventDispatcher(model, **shared))
    return NoDelivery()
