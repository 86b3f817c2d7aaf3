"""BoundedContextModel — static handler registry for one domain context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from typing_extensions import Self

from ..primitives.exceptions import HandlerRegistrationError
from ..utils import handler_name
from .runtime import RuntimeModel

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class BoundedContextModel:
    """Declarative store of the command and event handlers of one context.

    Handlers are registered during bootstrapping, either as *classes*
    (instantiated through a handler factory when the runtime model is built)
    or as ready *instances*. Once registration is complete the model is
    frozen; engines and dispatchers freeze the model they receive, after
    which it is read-only shared state that needs no locking.

    **Conflict detection:** registering a second, different command handler
    for the same command type raises ``HandlerRegistrationError``. Event
    types may have any number of handlers; they run in registration order.
    """

    def __init__(self, name: str = "default") -> None:
        self._name = name
        self._command_handlers: dict[type[Any], Any] = {}
        self._event_handlers: dict[type[Any], list[Any]] = {}
        self._frozen = False

    @property
    def name(self) -> str:
        """Context key under which this context's events are recorded."""
        return self._name

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ── Registration ─────────────────────────────────────────────

    def register_command_handler(self, command_type: type[Any], handler: Any) -> None:
        self._ensure_mutable(command_type)
        existing = self._command_handlers.get(command_type)
        if existing is not None and existing is not handler:
            msg = (
                f"Duplicate command handler for {command_type.__name__}: "
                f"{handler_name(existing)} already registered, "
                f"cannot register {handler_name(handler)}"
            )
            raise HandlerRegistrationError(msg)
        self._command_handlers[command_type] = handler
        logger.debug(
            "Registered command handler %s -> %s",
            command_type.__name__,
            handler_name(handler),
        )

    def register_event_handler(self, event_type: type[Any], handler: Any) -> None:
        self._ensure_mutable(event_type)
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(
                "Registered event handler %s -> %s",
                event_type.__name__,
                handler_name(handler),
            )

    def freeze(self) -> Self:
        """End the initialization step; later registrations are rejected."""
        self._frozen = True
        return self

    def _ensure_mutable(self, message_type: type[Any]) -> None:
        if self._frozen:
            msg = (
                f"Bounded context {self._name!r} is frozen, "
                f"cannot register a handler for {message_type.__name__}"
            )
            raise HandlerRegistrationError(msg)

    # ── Lookup ───────────────────────────────────────────────────

    def lookup_command_handler(self, command_type: type[Any]) -> Any | None:
        return self._command_handlers.get(command_type)

    def lookup_event_handlers(self, event_type: type[Any]) -> tuple[Any, ...]:
        return tuple(self._event_handlers.get(event_type, ()))

    def has_event_handlers(self, event_type: type[Any]) -> bool:
        return bool(self._event_handlers.get(event_type))

    def build_runtime_model(
        self, handler_factory: Callable[[type[Any]], Any] | None = None
    ) -> RuntimeModel:
        """Resolve every registration into a handler instance."""
        factory = handler_factory or (lambda cls: cls())

        def _resolve(handler: Any) -> Any:
            return factory(handler) if isinstance(handler, type) else handler

        return RuntimeModel(
            command_handlers={
                k: _resolve(v) for k, v in self._command_handlers.items()
            },
            event_handlers={
                k: tuple(_resolve(h) for h in v)
                for k, v in self._event_handlers.items()
            },
        )

    # ── Introspection ────────────────────────────────────────────

    def get_registered_handlers(self) -> dict[str, Any]:
        """Return a snapshot of all registered handlers (for debugging)."""
        return {
            "context": self._name,
            "commands": {
                k.__name__: handler_name(v) for k, v in self._command_handlers.items()
            },
            "events": {
                k.__name__: [handler_name(h) for h in v]
                for k, v in self._event_handlers.items()
            },
        }


__all__ = ["BoundedContextModel"]
