"""EventDispatcher — one-way delivery of events to their handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..options import HandlerFailurePolicy
from ..ports.handlers import IEventDispatcher
from .event_handler import ContextEventHandler
from .invocation import deliver_event

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ..domain.events import DomainEvent
    from ..model.bounded_context import BoundedContextModel
    from ..ports.handlers import IEventHandler

logger = logging.getLogger(__name__)


class EventDispatcher(IEventDispatcher):
    """One-way fan-out of an event to the handlers defined for its type.

    Only the model's event handler definitions decide *whether* an event is
    delivered; the delivery itself goes through *event_handler*, by default a
    :class:`~ode_domain_engine.cqrs.event_handler.ContextEventHandler` that
    invokes those handlers in registration order.

    Commands raised by the handlers are **not** forwarded anywhere. Whoever
    composes the event handler decides what happens with them; use a
    :class:`~ode_domain_engine.cqrs.broker.DomainBroker` for cascades.
    """

    def __init__(
        self,
        model: BoundedContextModel,
        event_handler: IEventHandler | None = None,
        *,
        failure_policy: HandlerFailurePolicy = HandlerFailurePolicy.FAIL_FAST,
        cache_runtime_model: bool = False,
        handler_factory: Callable[[type[Any]], Any] | None = None,
    ) -> None:
        self._model = model.freeze()
        self._failure_policy = failure_policy
        self._event_handler: IEventHandler = event_handler or ContextEventHandler(
            self._model,
            failure_policy=failure_policy,
            cache_runtime_model=cache_runtime_model,
            handler_factory=handler_factory,
        )

    @property
    def event_handler(self) -> IEventHandler:
        return self._event_handler

    async def dispatch(self, event: DomainEvent) -> None:
        """Deliver *event*; events without registered handlers are skipped."""
        if not self._model.has_event_handlers(type(event)):
            return

        commands = await deliver_event(
            self._event_handler, event, policy=self._failure_policy
        )
        if commands:
            logger.debug(
                "Dispatcher ignoring %d command(s) raised for %s (event_id=%s)",
                len(commands),
                event.event_type,
                event.event_id,
            )

    async def dispatch_all(self, events: Sequence[DomainEvent]) -> None:
        """Dispatch each event in order."""
        for event in events:
            await self.dispatch(event)
