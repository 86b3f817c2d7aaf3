"""RuntimeModel — handler instances resolved from a bounded context model."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .bounded_context import BoundedContextModel


class RuntimeModel:
    """Immutable view of resolved handler instances."""

    def __init__(
        self,
        command_handlers: Mapping[type[Any], Any],
        event_handlers: Mapping[type[Any], tuple[Any, ...]],
    ) -> None:
        self._command_handlers = MappingProxyType(dict(command_handlers))
        self._event_handlers = MappingProxyType(dict(event_handlers))

    def command_handler(self, command_type: type[Any]) -> Any | None:
        return self._command_handlers.get(command_type)

    def event_handlers(self, event_type: type[Any]) -> tuple[Any, ...]:
        return self._event_handlers.get(event_type, ())


class RuntimeModelProvider:
    """Hands out runtime models, memoized when *cached* is set.

    Uncached, every call to :meth:`get` builds fresh handler instances, so
    handlers may keep per-call state. Cached, the first runtime model is kept
    for the lifetime of the provider (single-instance deployments only).
    """

    def __init__(
        self,
        model: BoundedContextModel,
        *,
        cached: bool = False,
        handler_factory: Callable[[type[Any]], Any] | None = None,
    ) -> None:
        self._model = model
        self._cached = cached
        self._handler_factory = handler_factory
        self._runtime: RuntimeModel | None = None

    @property
    def cached(self) -> bool:
        return self._cached

    def get(self) -> RuntimeModel:
        if not self._cached:
            return self._model.build_runtime_model(self._handler_factory)
        if self._runtime is None:
            self._runtime = self._model.build_runtime_model(self._handler_factory)
        return self._runtime
