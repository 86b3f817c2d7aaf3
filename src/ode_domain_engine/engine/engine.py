"""DomainEngine — executes a command and its whole cascade as one unit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..context import (
    ExecutionContext,
    get_current_context,
    reset_current_context,
    set_current_context,
)
from ..correlation import (
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from ..cqrs.broker import DomainBroker
from ..cqrs.event_dispatcher import EventDispatcher
from ..cqrs.invocation import as_events, call_handler
from ..domain.events import enrich_event_metadata
from ..instrumentation import get_hook_registry
from ..middleware.pipeline import build_pipeline
from ..model.runtime import RuntimeModelProvider
from ..options import DeliveryMode, DomainOptions
from ..primitives.exceptions import DomainConfigurationError, UnregisteredHandlerError
from .delivery import (
    BrokerDelivery,
    DeliveryStrategy,
    DispatcherDelivery,
    EventHandlerDelivery,
    build_delivery,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ..domain.commands import Command
    from ..domain.events import DomainEvent
    from ..model.bounded_context import BoundedContextModel
    from ..ports.event_queue import IEventQueueWriter
    from ..ports.event_store import IEventStore
    from ..ports.handlers import IEventBroker, IEventDispatcher, IEventHandler
    from ..ports.middleware import IMiddleware
    from ..ports.unit_of_work import UnitOfWork
    from ..primitives.exceptions import EventHandlerFailureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one ``execute`` call.

    ``events`` holds every event persisted for the cascade, in cascade
    order. ``failures`` lists event-handler failures absorbed under the
    best-effort policy. ``max_depth`` is the deepest level the cascade
    reached (0 = no cascaded commands).
    """

    events: tuple[DomainEvent, ...]
    failures: tuple[EventHandlerFailureError, ...] = ()
    max_depth: int = 0
    correlation_id: str | None = None


class DomainEngine:
    """Executes commands against one bounded context.

    ``execute(command)``:

    1. Looks up the command handler (``UnregisteredHandlerError`` if none).
    2. Runs it through the middleware pipeline and stages the returned
       events in order.
    3. Hands the events to the delivery strategy; commands returned by a
       broker are pushed on an explicit worklist and executed depth-first,
       one level deeper than the command whose events raised them.
    4. Commits: all events of the cascade are appended to the event store in
       one batch. Any failure before that point, including a persistence
       failure, discards everything (all-or-nothing).
    5. After the commit: queue egress (fire-and-forget) and post-commit
       dispatch.

    Parameters
    ----------
    model:
        The bounded context model; frozen on construction.
    event_store:
        :class:`~ode_domain_engine.ports.event_store.IEventStore`.
    options:
        :class:`~ode_domain_engine.options.DomainOptions`.
    delivery:
        Explicit delivery strategy. Defaults to the one ``options.delivery``
        names.
    uow_factory:
        Optional host unit-of-work factory joined by every root ``execute``.
    event_queue_writer:
        Optional egress sink written after each successful commit.
    middlewares:
        Middleware wrapped around every command-handler invocation.
    handler_factory:
        Optional callable ``(handler_cls) -> handler_instance``.
    """

    def __init__(
        self,
        model: BoundedContextModel,
        event_store: IEventStore,
        options: DomainOptions | None = None,
        *,
        delivery: DeliveryStrategy | None = None,
        uow_factory: Callable[[], UnitOfWork] | None = None,
        event_queue_writer: IEventQueueWriter | None = None,
        middlewares: Sequence[IMiddleware] = (),
        handler_factory: Callable[[type[Any]], Any] | None = None,
    ) -> None:
        self._model = model.freeze()
        self._event_store = event_store
        options = options or DomainOptions.defaults()
        if delivery is None:
            delivery = build_delivery(self._model, options, handler_factory)
        elif options.delivery not in (DeliveryMode.NONE, delivery.mode):
            msg = (
                f"Options select {options.delivery.value} delivery but a "
                f"{delivery.mode.value} strategy was supplied"
            )
            raise DomainConfigurationError(msg)
        if options.delivery is not delivery.mode:
            options = options.model_copy(update={"delivery": delivery.mode})
        self._options = options
        self._delivery = delivery
        self._uow_factory = uow_factory
        self._event_queue_writer = event_queue_writer
        self._middlewares = tuple(middlewares)
        self._handler_factory = handler_factory
        self._runtime = RuntimeModelProvider(
            self._model,
            cached=options.cache_runtime_model,
            handler_factory=handler_factory,
        )

    # ── Configuration ────────────────────────────────────────────

    @property
    def model(self) -> BoundedContextModel:
        return self._model

    @property
    def options(self) -> DomainOptions:
        return self._options

    @property
    def delivery(self) -> DeliveryStrategy:
        return self._delivery

    @property
    def delivery_mode(self) -> DeliveryMode:
        return self._delivery.mode

    @property
    def event_queue_writer(self) -> IEventQueueWriter | None:
        return self._event_queue_writer

    def with_event_broker(self, broker: IEventBroker | None = None) -> DomainEngine:
        """Return an engine that cascades through *broker* (default: model's)."""
        self._ensure_no_delivery(DeliveryMode.BROKER)
        broker = broker or DomainBroker(
            self._model,
            failure_policy=self._options.failure_policy,
            cache_runtime_model=self._options.cache_runtime_model,
            handler_factory=self._handler_factory,
        )
        return self._replace(delivery=BrokerDelivery(broker))

    def with_event_dispatcher(self, dispatcher: IEventDispatcher) -> DomainEngine:
        """Return an engine that dispatches one-way after each commit."""
        self._ensure_no_delivery(DeliveryMode.DISPATCHER)
        return self._replace(delivery=DispatcherDelivery(dispatcher))

    def with_event_handler(self, event_handler: IEventHandler) -> DomainEngine:
        """Return an engine that hands events to *event_handler* in transaction.

        The handler is called once per event that has handler definitions in
        the model; dispatching the commands it raises is up to it.
        """
        self._ensure_no_delivery(DeliveryMode.EVENT_HANDLER)
        dispatcher = EventDispatcher(
            self._model,
            event_handler,
            failure_policy=self._options.failure_policy,
        )
        return self._replace(delivery=EventHandlerDelivery(dispatcher))

    def with_event_queue(self, writer: IEventQueueWriter) -> DomainEngine:
        """Return an engine that writes committed events to *writer*."""
        return self._replace(event_queue_writer=writer)

    def _ensure_no_delivery(self, requested: DeliveryMode) -> None:
        if self._delivery.mode is not DeliveryMode.NONE:
            msg = (
                f"Engine already delivers through {self._delivery.mode.value}, "
                f"cannot add {requested.value}"
            )
            raise DomainConfigurationError(msg)

    def _replace(self, **changes: Any) -> DomainEngine:
        delivery: DeliveryStrategy = changes.get("delivery", self._delivery)
        return DomainEngine(
            self._model,
            self._event_store,
            self._options.model_copy(update={"delivery": delivery.mode}),
            delivery=delivery,
            uow_factory=changes.get("uow_factory", self._uow_factory),
            event_queue_writer=changes.get(
                "event_queue_writer", self._event_queue_writer
            ),
            middlewares=changes.get("middlewares", self._middlewares),
            handler_factory=self._handler_factory,
        )

    # ── Public API ───────────────────────────────────────────────

    async def execute(self, command: Command) -> list[DomainEvent]:
        """Execute *command* and its cascade; return the persisted events."""
        result = await self.execute_with_result(command)
        return list(result.events)

    async def execute_with_result(self, command: Command) -> ExecutionResult:
        """Like :meth:`execute`, with absorbed failures and depth reported.

        Called from inside a handler while a cascade of the same bounded
        context is running, the command joins that cascade: same
        transaction, one level deeper than the caller.
        """
        current = get_current_context()
        if (
            current is not None
            and current.is_open
            and current.context_key == self._model.name
        ):
            events = await self._run_nested(current, command)
            return ExecutionResult(
                events=tuple(events),
                max_depth=current.max_depth_reached,
                correlation_id=current.correlation_id,
            )
        return await self._run_root(command)

    # ── Internals ────────────────────────────────────────────────

    async def _run_root(self, command: Command) -> ExecutionResult:
        if not command.correlation_id:
            command = command.model_copy(
                update={"correlation_id": generate_correlation_id()}
            )
        correlation_id = command.correlation_id

        context = ExecutionContext(
            self._event_store,
            self._model.name,
            max_depth=self._options.max_cascade_depth,
            correlation_id=correlation_id,
            host=self._uow_factory() if self._uow_factory is not None else None,
            runtime=self._runtime.get(),
        )
        if self._event_queue_writer is not None:
            writer = self._event_queue_writer
            context.on_commit(lambda: self._write_to_queue(writer, context.events))

        context_token = set_current_context(context)
        correlation_token = set_correlation_id(correlation_id)
        try:
            events: list[DomainEvent] = await get_hook_registry().execute_all(
                f"engine.execute.{command.command_type}",
                {
                    "command.type": command.command_type,
                    "command.id": command.command_id,
                    "context": self._model.name,
                    "delivery": self._delivery.mode.value,
                    "correlation_id": correlation_id,
                },
                lambda: self._run_in_context(context, command),
            )
        finally:
            reset_correlation_id(correlation_token)
            reset_current_context(context_token)

        return ExecutionResult(
            events=tuple(events),
            failures=tuple(context.failures),
            max_depth=context.max_depth_reached,
            correlation_id=correlation_id,
        )

    async def _run_in_context(
        self, context: ExecutionContext, command: Command
    ) -> list[DomainEvent]:
        async with context:
            await self._cascade(context, command, 0)
        await context.run_deferred()
        # Includes events staged by nested executes.
        return list(context.events)

    async def _run_nested(
        self, context: ExecutionContext, command: Command
    ) -> list[DomainEvent]:
        caller_depth = context.depth
        try:
            return await self._cascade(context, command, caller_depth + 1)
        finally:
            context.depth = caller_depth

    async def _cascade(
        self, context: ExecutionContext, command: Command, depth: int
    ) -> list[DomainEvent]:
        """Run *command* and everything it cascades into, depth-first.

        Uses an explicit LIFO worklist instead of recursion: commands raised
        by one step are pushed in reverse so they pop in the order raised,
        and each is fully cascaded before its next sibling.
        """
        produced: list[DomainEvent] = []
        worklist: list[tuple[Command, int, Any]] = [(command, depth, None)]
        while worklist:
            current, level, direct_handler = worklist.pop()
            context.enter(current, level)
            handler = direct_handler or self._resolve_handler(context, current, level)
            events = await self._handle_command(handler, current, level, context)
            accepted = context.stage(events)
            produced.extend(accepted)

            follow_ups = await self._delivery.deliver(accepted, context)
            for follow_up in reversed(follow_ups):
                worklist.append(
                    (
                        follow_up,
                        level + 1,
                        self._delivery.command_handler_for(follow_up),
                    )
                )
        return produced

    def _resolve_handler(
        self, context: ExecutionContext, command: Command, depth: int
    ) -> Any:
        runtime = context.runtime or self._runtime.get()
        handler = runtime.command_handler(type(command))
        if handler is None:
            raise UnregisteredHandlerError(
                command.command_type, command.command_id, depth=depth
            )
        return handler

    async def _handle_command(
        self,
        handler: Any,
        command: Command,
        depth: int,
        context: ExecutionContext,
    ) -> list[DomainEvent]:
        async def _innermost(cmd: Command) -> list[DomainEvent]:
            return as_events(await call_handler(handler, cmd), handler)

        pipeline = build_pipeline(self._middlewares, _innermost)
        events = await get_hook_registry().execute_all(
            f"command.handle.{command.command_type}",
            {
                "command.type": command.command_type,
                "command.id": command.command_id,
                "depth": depth,
                "correlation_id": command.correlation_id,
            },
            lambda: pipeline(command),
        )
        return [
            enrich_event_metadata(
                event,
                correlation_id=command.correlation_id or context.correlation_id,
                causation_id=command.command_id,
                depth=depth,
            )
            for event in as_events(events, handler)
        ]

    async def _write_to_queue(
        self, writer: IEventQueueWriter, events: Sequence[DomainEvent]
    ) -> None:
        for event in events:
            try:
                await writer.write(event)
            except Exception:
                logger.warning(
                    "Queue egress failed for %s (event_id=%s)",
                    event.event_type,
                    event.event_id,
                    exc_info=True,
                )
