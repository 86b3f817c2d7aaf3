"""Handler base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..domain.commands import Command
    from ..domain.events import DomainEvent

C = TypeVar("C", bound="Command")  # Command type
E = TypeVar("E", bound="DomainEvent")  # Event type


class CommandHandler(ABC, Generic[C]):
    """Base class for command handlers.

    Handlers must be registered with a ``BoundedContextModel``. Any object
    with a ``handle`` method (sync or async), or a plain callable, works too;
    this base class only documents the contract.

    Usage::

        class CreateOrderHandler(CommandHandler[CreateOrder]):
            async def handle(self, command: CreateOrder) -> list[DomainEvent]:
                return [OrderCreated(order_id=command.order_id)]
    """

    @abstractmethod
    async def handle(self, command: C) -> Sequence[DomainEvent]:
        """Execute the command and return the events it produced, in order."""
        ...


class EventHandler(ABC, Generic[E]):
    """Base class for event handlers (process managers, reactions).

    Return the commands that should run next; an empty list when none.
    When events may be redelivered (see
    :class:`~ode_domain_engine.cqrs.transactional.TransactionalEventHandler`)
    the handler must be safe to run more than once for the same event.

    Usage::

        class ReserveStockOnOrderCreated(EventHandler[OrderCreated]):
            async def handle(self, event: OrderCreated) -> list[Command]:
                return [ReserveStock(order_id=event.order_id)]
    """

    @abstractmethod
    async def handle(self, event: E) -> Sequence[Command]:
        """React to the domain event."""
        ...
