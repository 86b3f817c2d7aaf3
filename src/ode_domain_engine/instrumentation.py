"""Instrumentation hooks around engine operations (tracing, metrics, ...).

A hook wraps an operation the way middleware wraps a handler: it receives
the operation name, a dict of attributes and a zero-argument ``next_handler``
it must await. Operations wrapped by the engine:

- ``engine.execute.<Command>``: one external ``execute`` call
- ``command.handle.<Command>``: one command-handler invocation
- ``event.deliver.<Event>.<Handler>``: one event-handler invocation
- ``event_store.append.<context>``: the commit of a cascade's events
- ``event_handler.transactional.<Event>``: one idempotent ``handle`` call

Registrations filter on these names with ``fnmatch`` patterns, e.g.
``["command.handle.*", "event_store.*"]``.
"""

from __future__ import annotations

import fnmatch
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    Next = Callable[[], Awaitable[Any]]


@runtime_checkable
class InstrumentationHook(Protocol):
    """Protocol for instrumentation hooks."""

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Wrap an operation; must await and return ``next_handler()``."""
        ...


@dataclass
class HookRegistration:
    """One hook plus the operations it applies to.

    An empty ``patterns`` tuple matches every operation. Match results are
    memoised per operation name; the set of names the engine emits is small.
    """

    hook: InstrumentationHook
    priority: int = 0
    patterns: tuple[str, ...] = ()
    enabled: bool = True
    _seen: dict[str, bool] = field(default_factory=dict, repr=False)

    def applies_to(self, operation: str) -> bool:
        if not self.enabled:
            return False
        if not self.patterns:
            return True
        hit = self._seen.get(operation)
        if hit is None:
            hit = any(fnmatch.fnmatchcase(operation, p) for p in self.patterns)
            self._seen[operation] = hit
        return hit


class HookRegistry:
    """Ordered collection of hooks; lower priority wraps outermost."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: Iterable[str] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        registration = HookRegistration(
            hook, priority, tuple(operations or ()), enabled
        )
        self._registrations.append(registration)
        # Stable sort: equal priorities keep registration order.
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Next,
    ) -> Any:
        """Run *next_handler* inside every hook that applies to *operation*."""
        chain = next_handler
        for registration in reversed(self._registrations):
            if registration.applies_to(operation):
                chain = _bind(registration.hook, operation, attributes, chain)
        return await chain()

    def clear(self) -> None:
        self._registrations.clear()


def _bind(
    hook: InstrumentationHook,
    operation: str,
    attributes: dict[str, Any],
    inner: Next,
) -> Next:
    async def call() -> Any:
        return await hook(operation, attributes, inner)

    return call


_hook_registry: ContextVar[HookRegistry | None] = ContextVar(
    "hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Return the registry of the current context, creating it on first use."""
    registry = _hook_registry.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    _hook_registry.set(registry)
