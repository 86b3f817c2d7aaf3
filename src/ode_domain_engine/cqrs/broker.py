"""DomainBroker — two-way event delivery that collects raised commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..options import HandlerFailurePolicy
from ..ports.handlers import IEventBroker
from .event_handler import ContextEventHandler
from .invocation import deliver_event

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ..domain.commands import Command
    from ..domain.events import DomainEvent
    from ..model.bounded_context import BoundedContextModel
    from ..ports.handlers import ICommandHandler, IEventHandler

logger = logging.getLogger(__name__)


class DomainBroker(IEventBroker):
    """Delivers events and answers with the commands their handlers raised.

    The two-way counterpart of
    :class:`~ode_domain_engine.cqrs.event_dispatcher.EventDispatcher`: for
    each event, in order, every matching handler runs and the commands it
    raises are collected into one flat list ordered by (event, handler
    registration, command).

    When *command_handler* is given, the engine routes the commands this
    broker returns straight to it instead of looking them up in the model,
    while still persisting their events in the same transaction.
    """

    def __init__(
        self,
        model: BoundedContextModel,
        event_handler: IEventHandler | None = None,
        command_handler: ICommandHandler | None = None,
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
        self._command_handler = command_handler

    @property
    def event_handler(self) -> IEventHandler:
        return self._event_handler

    @property
    def command_handler(self) -> ICommandHandler | None:
        return self._command_handler

    async def broker(self, events: Sequence[DomainEvent]) -> list[Command]:
        commands: list[Command] = []
        for event in events:
            if not self._model.has_event_handlers(type(event)):
                continue
            raised = await deliver_event(
                self._event_handler, event, policy=self._failure_policy
            )
            if raised:
                logger.debug(
                    "%s (event_id=%s) raised %s",
                    event.event_type,
                    event.event_id,
                    ", ".join(c.command_type for c in raised),
                )
            commands.extend(raised)
        return commands
