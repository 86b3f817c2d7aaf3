"""ExecutionContext — the transaction boundary of one external ``execute`` call."""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any

from .correlation import get_correlation_id
from .instrumentation import get_hook_registry
from .ports.event_store import StoredEvent
from .ports.unit_of_work import UnitOfWork
from .primitives.exceptions import CascadeDepthExceededError, PersistenceFailureError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from .domain.commands import Command
    from .domain.events import DomainEvent
    from .model.runtime import RuntimeModel
    from .ports.event_store import IEventStore
    from .primitives.exceptions import EventHandlerFailureError

logger = logging.getLogger("ode_domain.context")

#: ContextVar tracking the context of the cascade running in this task.
#: ``None`` means the next ``execute`` is a root call and opens a new one.
_current_context: ContextVar[ExecutionContext | None] = ContextVar(
    "current_execution_context", default=None
)


def get_current_context() -> ExecutionContext | None:
    """Return the active execution context (or *None* outside a cascade)."""
    return _current_context.get()


def set_current_context(
    context: ExecutionContext | None,
) -> Token[ExecutionContext | None]:
    return _current_context.set(context)


def reset_current_context(token: Token[ExecutionContext | None]) -> None:
    _current_context.reset(token)


class ExecutionContext(UnitOfWork):
    """Owns everything that belongs to one cascade and commits it as one unit.

    - Events are *staged* here as the cascade produces them and appended to
      the event store in a single batch on commit (buffer-then-commit), so a
      failure anywhere in the command/event tree retains nothing.
    - The depth counter guards against runaway cascades.
    - Best-effort handler failures are collected in :attr:`failures`.
    - Post-commit deliveries (one-way dispatch) are queued with :meth:`defer`
      and run by the engine after the commit point.

    An optional *host* unit of work is entered with the context, committed
    after the event batch and rolled back with it.
    """

    def __init__(
        self,
        event_store: IEventStore,
        context_key: str,
        *,
        max_depth: int,
        correlation_id: str | None = None,
        host: UnitOfWork | None = None,
        runtime: RuntimeModel | None = None,
    ) -> None:
        super().__init__()
        self._event_store = event_store
        self.context_key = context_key
        self.max_depth = max_depth
        self.correlation_id = correlation_id or get_correlation_id()
        self.runtime = runtime
        self._host = host
        self._staged: list[DomainEvent] = []
        self._staged_ids: set[str] = set()
        self._deferred: list[Callable[[], Awaitable[None]]] = []
        self.failures: list[EventHandlerFailureError] = []
        self.depth = 0
        self.max_depth_reached = 0
        self._open = False
        self._committed = False

    # ── State ────────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def events(self) -> tuple[DomainEvent, ...]:
        """Events staged (or, after commit, persisted) in cascade order."""
        return tuple(self._staged)

    def enter(self, command: Command, depth: int) -> None:
        """Record that *command* is about to run at *depth*."""
        if depth > self.max_depth:
            raise CascadeDepthExceededError(
                type(command).__name__,
                command.command_id,
                depth=depth,
                max_depth=self.max_depth,
            )
        self.depth = depth
        self.max_depth_reached = max(self.max_depth_reached, depth)

    def stage(self, events: Sequence[DomainEvent]) -> list[DomainEvent]:
        """Stage *events* in order, dropping identities already staged."""
        accepted: list[DomainEvent] = []
        for event in events:
            if event.event_id in self._staged_ids:
                logger.debug(
                    "Skipping duplicate %s (event_id=%s) in context %s",
                    type(event).__name__,
                    event.event_id,
                    self.context_key,
                )
                continue
            self._staged_ids.add(event.event_id)
            self._staged.append(event)
            accepted.append(event)
        return accepted

    def record_failure(self, error: EventHandlerFailureError) -> None:
        self.failures.append(error)

    def defer(self, delivery: Callable[[], Awaitable[None]]) -> None:
        """Queue a delivery to run after the commit point."""
        self._deferred.append(delivery)

    async def run_deferred(self) -> None:
        """Run queued deliveries in order; the first failure propagates."""
        while self._deferred:
            delivery = self._deferred.pop(0)
            await delivery()

    # ── UnitOfWork ───────────────────────────────────────────────

    async def commit(self) -> None:
        if self._staged:
            stored = [StoredEvent.from_event(e, self.context_key) for e in self._staged]
            try:
                await get_hook_registry().execute_all(
                    f"event_store.append.{self.context_key}",
                    {
                        "context": self.context_key,
                        "event_count": len(stored),
                        "correlation_id": self.correlation_id,
                    },
                    lambda: self._event_store.append(stored, self.context_key),
                )
            except Exception as exc:
                logger.error(
                    "Persisting %d event(s) for context %s failed: %s",
                    len(stored),
                    self.context_key,
                    exc,
                )
                raise PersistenceFailureError(
                    self.context_key, [s.event_id for s in stored]
                ) from exc
        if self._host is not None:
            await self._host.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._staged:
            logger.debug(
                "Discarding %d staged event(s) for context %s",
                len(self._staged),
                self.context_key,
            )
        self._staged.clear()
        self._staged_ids.clear()
        self._deferred.clear()
        self.discard_commit_hooks()
        if self._host is not None:
            await self._host.rollback()

    async def _rollback_after_failure(self) -> None:
        # The failure that caused the rollback is the one that surfaces.
        try:
            await self.rollback()
        except Exception:
            logger.exception(
                "Rollback of context %s failed after an earlier error",
                self.context_key,
            )

    async def __aenter__(self) -> ExecutionContext:
        if self._host is not None:
            await self._host.__aenter__()
        self._open = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        try:
            if exc_type is not None:
                await self._rollback_after_failure()
                return
            try:
                await self.commit()
            except BaseException:
                await self._rollback_after_failure()
                raise
        finally:
            self._open = False
        if self._host is not None:
            await self._host.trigger_commit_hooks()
        await self.trigger_commit_hooks()
