"""ContextEventHandler — fans one event out to its registered handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..context import get_current_context
from ..model.runtime import RuntimeModelProvider
from ..options import HandlerFailurePolicy
from .invocation import deliver_event

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..domain.commands import Command
    from ..domain.events import DomainEvent
    from ..model.bounded_context import BoundedContextModel
    from ..model.runtime import RuntimeModel

logger = logging.getLogger(__name__)


class ContextEventHandler:
    """Event handler that runs every handler the model defines for an event.

    Handlers run one after another in registration order; the commands they
    raise are returned flattened in (handler order, command order). This is
    the default event handler behind the dispatcher, the broker and the
    transactional event handler.
    """

    def __init__(
        self,
        model: BoundedContextModel,
        *,
        failure_policy: HandlerFailurePolicy = HandlerFailurePolicy.FAIL_FAST,
        cache_runtime_model: bool = False,
        handler_factory: Callable[[type[Any]], Any] | None = None,
    ) -> None:
        self._model = model.freeze()
        self._failure_policy = failure_policy
        self._runtime = RuntimeModelProvider(
            self._model,
            cached=cache_runtime_model,
            handler_factory=handler_factory,
        )

    @property
    def failure_policy(self) -> HandlerFailurePolicy:
        return self._failure_policy

    def _current_runtime(self) -> RuntimeModel:
        # Inside an engine call the handlers live as long as that call.
        context = get_current_context()
        if (
            context is not None
            and context.runtime is not None
            and context.context_key == self._model.name
        ):
            return context.runtime
        return self._runtime.get()

    async def handle(self, event: DomainEvent) -> list[Command]:
        handlers = self._current_runtime().event_handlers(type(event))
        if not handlers:
            logger.debug("No event handlers registered for %s", event.event_type)
            return []

        commands: list[Command] = []
        for handler in handlers:
            commands.extend(
                await deliver_event(handler, event, policy=self._failure_policy)
            )
        return commands
