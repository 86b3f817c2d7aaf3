"""Shared routing helpers: invoking handlers and checking what they return."""

from __future__ import annotations

import logging
from inspect import isawaitable
from typing import Any

from ..context import get_current_context
from ..domain.commands import Command, enrich_command
from ..domain.events import CASCADE_DEPTH_KEY, DomainEvent
from ..instrumentation import get_hook_registry
from ..options import HandlerFailurePolicy
from ..primitives.exceptions import EventHandlerFailureError
from ..utils import handler_name

logger = logging.getLogger("ode_domain.handlers")


async def call_handler(handler: Any, message: Any) -> Any:
    """Invoke a sync or async handler object / callable with *message*."""
    if hasattr(handler, "handle"):
        result = handler.handle(message)
    elif callable(handler):
        result = handler(message)
    else:
        raise TypeError("Handler must be a callable or have a handle() method")

    if isawaitable(result):
        result = await result
    return result


def _as_list(result: Any, handler: Any, expected: type[Any]) -> list[Any]:
    if result is None:
        return []
    if isinstance(result, (str, bytes)) or not hasattr(result, "__iter__"):
        raise TypeError(
            f"{handler_name(handler)} must return a sequence of "
            f"{expected.__name__}, got {type(result).__name__}"
        )
    items = list(result)
    for item in items:
        if not isinstance(item, expected):
            raise TypeError(
                f"{handler_name(handler)} returned {type(item).__name__}, "
                f"expected {expected.__name__}"
            )
    return items


def as_events(result: Any, handler: Any) -> list[DomainEvent]:
    """Normalize a command handler's return value."""
    return _as_list(result, handler, DomainEvent)


def as_commands(result: Any, handler: Any) -> list[Command]:
    """Normalize an event handler's return value."""
    return _as_list(result, handler, Command)


def event_depth(event: DomainEvent) -> int | None:
    """Depth of the command that produced *event*, if known."""
    depth = event.metadata.get(CASCADE_DEPTH_KEY)
    if isinstance(depth, int):
        return depth
    context = get_current_context()
    return context.depth if context is not None else None


async def deliver_event(
    handler: Any,
    event: DomainEvent,
    *,
    policy: HandlerFailurePolicy,
) -> list[Command]:
    """Deliver *event* to one handler and return the commands it raised.

    Raised commands inherit the event's correlation and name the event as
    their cause. A failure is wrapped in ``EventHandlerFailureError``; under
    ``BEST_EFFORT`` it is logged, recorded on the active execution context
    and an empty list is returned instead.
    """
    name = handler_name(handler)
    try:
        result = await get_hook_registry().execute_all(
            f"event.deliver.{event.event_type}.{name}",
            {
                "handler.type": name,
                "event.type": event.event_type,
                "event.id": event.event_id,
                "correlation_id": event.correlation_id,
            },
            lambda: call_handler(handler, event),
        )
        commands = as_commands(result, handler)
    except EventHandlerFailureError as failure:
        if policy is HandlerFailurePolicy.FAIL_FAST:
            raise
        _absorb(failure)
        return []
    except Exception as exc:
        failure = EventHandlerFailureError(
            name, event.event_type, event.event_id, depth=event_depth(event)
        )
        if policy is HandlerFailurePolicy.FAIL_FAST:
            logger.exception(
                "Error executing handler %s for event %s",
                name,
                event.event_type,
            )
            raise failure from exc
        logger.warning(
            "Handler %s failed for event %s (event_id=%s), continuing",
            name,
            event.event_type,
            event.event_id,
            exc_info=True,
        )
        failure.__cause__ = exc
        _absorb(failure)
        return []

    return [
        enrich_command(
            command,
            correlation_id=event.correlation_id,
            causation_id=event.event_id,
        )
        for command in commands
    ]


def _absorb(failure: EventHandlerFailureError) -> None:
    context = get_current_context()
    if context is not None and failure not in context.failures:
        context.record_failure(failure)
