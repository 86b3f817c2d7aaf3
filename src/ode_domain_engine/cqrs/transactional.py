"""TransactionalEventHandler — idempotent handling of externally delivered events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..correlation import reset_correlation_id, set_correlation_id
from ..instrumentation import get_hook_registry
from ..options import HandlerFailurePolicy
from ..ports.event_store import IdempotencyKey
from ..primitives.exceptions import IdempotencyCheckError
from .event_handler import ContextEventHandler

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..domain.commands import Command
    from ..domain.events import DomainEvent
    from ..model.bounded_context import BoundedContextModel
    from ..ports.event_store import IEventStore
    from ..ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class TransactionalEventHandler:
    """Runs the model's event handlers at most once per event identity.

    Meant for events arriving from an external channel (a queue, a
    subscription) with at-least-once delivery, rather than from an
    in-process cascade.

    1. Looks up the idempotency marker ``(context_key, event_id)`` in the
       event store. If present, returns ``[]`` without invoking anything.
    2. Otherwise invokes the registered handlers, then writes the marker,
       both inside the unit of work created by *uow_factory* when one is
       given.

    **Contract for handler authors:** a crash after the handlers ran but
    before the marker was written leaves no marker, so the event is handled
    again on redelivery. Handlers must therefore be safe to re-run, or detect
    repeats themselves.

    The default *context_key* is ``"<model name>.event-handlers"``, distinct
    from the key the engine records events under.
    """

    def __init__(
        self,
        model: BoundedContextModel,
        event_store: IEventStore,
        *,
        cache_runtime_model: bool = False,
        failure_policy: HandlerFailurePolicy = HandlerFailurePolicy.FAIL_FAST,
        uow_factory: Callable[[], UnitOfWork] | None = None,
        context_key: str | None = None,
        handler_factory: Callable[[type[Any]], Any] | None = None,
    ) -> None:
        self._event_store = event_store
        self._uow_factory = uow_factory
        self._context_key = context_key or f"{model.name}.event-handlers"
        self._handlers = ContextEventHandler(
            model,
            failure_policy=failure_policy,
            cache_runtime_model=cache_runtime_model,
            handler_factory=handler_factory,
        )

    @property
    def context_key(self) -> str:
        return self._context_key

    async def handle(self, event: DomainEvent) -> list[Command]:
        """Handle *event* once; returns the commands the handlers raised."""
        key = IdempotencyKey(self._context_key, event.event_id)
        return await get_hook_registry().execute_all(  # type: ignore[no-any-return]
            f"event_handler.transactional.{event.event_type}",
            {
                "event.type": event.event_type,
                "event.id": event.event_id,
                "idempotency_key": str(key),
                "correlation_id": event.correlation_id,
            },
            lambda: self._handle(event, key),
        )

    async def _handle(self, event: DomainEvent, key: IdempotencyKey) -> list[Command]:
        try:
            already_handled = await self._event_store.has_record(key)
        except Exception as exc:
            raise IdempotencyCheckError(key, "lookup") from exc
        if already_handled:
            logger.debug(
                "%s (event_id=%s) already handled in %s, skipping",
                event.event_type,
                event.event_id,
                self._context_key,
            )
            return []

        token = set_correlation_id(event.correlation_id)
        try:
            if self._uow_factory is None:
                return await self._handle_and_mark(event, key)
            async with self._uow_factory():
                return await self._handle_and_mark(event, key)
        finally:
            reset_correlation_id(token)

    async def _handle_and_mark(
        self, event: DomainEvent, key: IdempotencyKey
    ) -> list[Command]:
        commands = await self._handlers.handle(event)
        try:
            await self._event_store.mark_handled(key)
        except Exception as exc:
            raise IdempotencyCheckError(key, "mark") from exc
        return commands
