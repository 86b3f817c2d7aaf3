"""ode-domain-engine — command/event execution for one bounded context.

Commands go to exactly one handler, the events it returns are persisted
atomically with everything they cascade into, and event handlers can be
reached one-way (dispatcher), two-way (broker) or idempotently from outside
(transactional event handler).
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import (
    InMemoryEventQueueWriter,
    InMemoryEventStore,
    InMemoryUnitOfWork,
    InMemoryUnitOfWorkFactory,
)
from .context import ExecutionContext, get_current_context
from .correlation import (
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

# ── CQRS ─────────────────────────────────────────────────────────
from .cqrs import (
    CommandHandler,
    ContextEventHandler,
    DomainBroker,
    EventDispatcher,
    EventHandler,
    TransactionalEventHandler,
)

# ── Domain ───────────────────────────────────────────────────────
from .domain import (
    CASCADE_DEPTH_KEY,
    Command,
    DomainEvent,
    enrich_command,
    enrich_event_metadata,
)

# ── Engine ───────────────────────────────────────────────────────
from .engine import (
    BrokerDelivery,
    DeliveryStrategy,
    DispatcherDelivery,
    DomainEngine,
    EventHandlerDelivery,
    ExecutionResult,
    NoDelivery,
    create_bounded_context_model,
    create_command_engine,
    create_domain_execution_engine,
    create_event_dispatcher,
    create_event_handler,
)
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)

# ── Middleware ───────────────────────────────────────────────────
from .middleware import LoggingMiddleware, build_pipeline

# ── Model ────────────────────────────────────────────────────────
from .model import BoundedContextModel, RuntimeModel, RuntimeModelProvider
from .options import (
    DEFAULT_MAX_CASCADE_DEPTH,
    DeliveryMode,
    DomainOptions,
    HandlerFailurePolicy,
)

# ── Ports ────────────────────────────────────────────────────────
from .ports import (
    ICommandHandler,
    IdempotencyKey,
    IEventBroker,
    IEventDispatcher,
    IEventHandler,
    IEventQueueWriter,
    IEventStore,
    IMiddleware,
    StoredEvent,
    UnitOfWork,
)

# ── Primitives ───────────────────────────────────────────────────
from .primitives import (
    CascadeDepthExceededError,
    DomainConfigurationError,
    DomainEngineError,
    DuplicateEventError,
    EventHandlerFailureError,
    EventStoreError,
    HandlerError,
    HandlerRegistrationError,
    IdempotencyCheckError,
    PersistenceFailureError,
    UnregisteredHandlerError,
)

__all__ = [
    "CASCADE_DEPTH_KEY",
    "DEFAULT_MAX_CASCADE_DEPTH",
    "BoundedContextModel",
    "BrokerDelivery",
    "CascadeDepthExceededError",
    "Command",
    "CommandHandler",
    "ContextEventHandler",
    "DeliveryMode",
    "DeliveryStrategy",
    "DispatcherDelivery",
    "DomainBroker",
    "DomainConfigurationError",
    "DomainEngine",
    "DomainEngineError",
    "DomainEvent",
    "DomainOptions",
    "DuplicateEventError",
    "EventDispatcher",
    "EventHandler",
    "EventHandlerDelivery",
    "EventHandlerFailureError",
    "EventStoreError",
    "ExecutionContext",
    "ExecutionResult",
    "HandlerError",
    "HandlerFailurePolicy",
    "HandlerRegistrationError",
    "HookRegistration",
    "HookRegistry",
    "ICommandHandler",
    "IEventBroker",
    "IEventDispatcher",
    "IEventHandler",
    "IEventQueueWriter",
    "IEventStore",
    "IMiddleware",
    "IdempotencyCheckError",
    "IdempotencyKey",
    "InMemoryEventQueueWriter",
    "InMemoryEventStore",
    "InMemoryUnitOfWork",
    "InMemoryUnitOfWorkFactory",
    "InstrumentationHook",
    "LoggingMiddleware",
    "NoDelivery",
    "PersistenceFailureError",
    "RuntimeModel",
    "RuntimeModelProvider",
    "StoredEvent",
    "TransactionalEventHandler",
    "UnitOfWork",
    "UnregisteredHandlerError",
    "build_pipeline",
    "create_bounded_context_model",
    "create_command_engine",
    "create_domain_execution_engine",
    "create_event_dispatcher",
    "create_event_handler",
    "enrich_command",
    "enrich_event_metadata",
    "generate_correlation_id",
    "get_correlation_id",
    "get_current_context",
    "get_hook_registry",
    "set_correlation_id",
    "set_hook_registry",
]
