"""Exceptions raised by the domain engine.

Every failure the engine surfaces to a caller derives from
:class:`DomainEngineError` and carries enough context (handler, message
identity, cascade depth) to diagnose it without inspecting internals.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..ports.event_store import IdempotencyKey


class DomainEngineError(Exception):
    """Root exception for the domain engine."""


class DomainConfigurationError(DomainEngineError):
    """Raised when an engine is wired inconsistently.

    E.g. enabling a second delivery strategy on an engine that already has
    one, or passing conflicting collaborators to a factory.
    """


class HandlerError(DomainEngineError):
    """Base class for handler registration, lookup and execution errors."""


class HandlerRegistrationError(HandlerError):
    """Raised when a handler registration is rejected.

    Usage: ``BoundedContextModel`` raises this for a second command handler
    on the same command type, or for any registration after ``freeze()``.
    """


class UnregisteredHandlerError(HandlerError):
    """A command has no registered command handler.

    This is a configuration error, never a retry condition.
    """

    def __init__(
        self,
        message_type: str,
        message_id: str | None = None,
        *,
        depth: int = 0,
    ) -> None:
        self.message_type = message_type
        self.message_id = message_id
        self.depth = depth
        super().__init__(
            f"No handler registered for {message_type} "
            f"(id={message_id!r}, depth={depth})"
        )


class EventHandlerFailureError(HandlerError):
    """An event handler raised while processing an event."""

    def __init__(
        self,
        handler_name: str,
        event_type: str,
        event_id: str,
        *,
        depth: int | None = None,
    ) -> None:
        self.handler_name = handler_name
        self.event_type = event_type
        self.event_id = event_id
        self.depth = depth
        msg = f"Event handler {handler_name} failed for {event_type} (id={event_id!r}"
        if depth is not None:
            msg += f", depth={depth}"
        super().__init__(msg + ")")


class CascadeDepthExceededError(DomainEngineError):
    """The command/event cascade went deeper than the configured limit.

    Usually means a cycle in the domain logic, e.g. command A raises an event
    whose handler raises command A again.
    """

    def __init__(
        self,
        command_type: str,
        command_id: str,
        *,
        depth: int,
        max_depth: int,
    ) -> None:
        self.command_type = command_type
        self.command_id = command_id
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"Cascade depth {depth} exceeds maximum of {max_depth} "
            f"while executing {command_type} (id={command_id!r})"
        )


class EventStoreError(DomainEngineError):
    """Raised by event-store implementations when an operation fails."""


class DuplicateEventError(EventStoreError):
    """An event with the same idempotency key is already recorded."""

    def __init__(self, key: IdempotencyKey) -> None:
        self.key = key
        super().__init__(f"Event already recorded for key {key}")


class PersistenceFailureError(DomainEngineError):
    """Persisting the events of a cascade failed; nothing was retained."""

    def __init__(self, context_key: str, event_ids: Sequence[str]) -> None:
        self.context_key = context_key
        self.event_ids = tuple(event_ids)
        super().__init__(
            f"Failed to persist {len(self.event_ids)} event(s) "
            f"for context {context_key!r}"
        )


class IdempotencyCheckError(DomainEngineError):
    """The idempotency marker could not be queried or written."""

    def __init__(self, key: IdempotencyKey, operation: str) -> None:
        self.key = key
        self.operation = operation
        super().__init__(f"Idempotency {operation} failed for key {key}")
