"""Handler, dispatcher and broker protocols."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Sequence

    from ..domain.commands import Command
    from ..domain.events import DomainEvent


@runtime_checkable
class ICommandHandler(Protocol):
    """Domain logic for one command type; returns the events it produced.

    Event order is significant and preserved (e.g. "created" before
    "renamed"). Returning ``None`` means no events.
    """

    def handle(
        self, command: Any
    ) -> Awaitable[Sequence[DomainEvent] | None] | Sequence[DomainEvent] | None:
        ...


@runtime_checkable
class IEventHandler(Protocol):
    """Reaction to an event; returns the commands it wants executed next.

    Handlers invoked through the transactional event handler may run more
    than once for the same event (at-least-once delivery) and must be safe to
    re-run.
    """

    def handle(
        self, event: Any
    ) -> Awaitable[Sequence[Command] | None] | Sequence[Command] | None:
        ...


@runtime_checkable
class IEventDispatcher(Protocol):
    """One-way delivery: commands raised by handlers are not forwarded."""

    async def dispatch(self, event: DomainEvent) -> None:
        """Deliver *event* to its handlers."""
        ...


@runtime_checkable
class IEventBroker(Protocol):
    """Two-way delivery: returns the commands raised by the handlers.

    A broker may also expose a ``command_handler`` attribute. When it is not
    ``None`` the engine sends the commands this broker returns to that handler
    instead of looking them up in the model.
    """

    async def broker(self, events: Sequence[DomainEvent]) -> list[Command]:
        """Deliver *events* and return the raised commands, in order."""
        ...

