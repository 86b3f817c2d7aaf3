"""Domain engine: command execution, cascade and delivery strategies."""

from __future__ import annotations

from .delivery import (
    BrokerDelivery,
    DeliveryStrategy,
    DispatcherDelivery,
    EventHandlerDelivery,
    NoDelivery,
    build_delivery,
)
from .engine import DomainEngine, ExecutionResult
from .factory import (
    create_bounded_context_model,
    create_command_engine,
    create_domain_execution_engine,
    create_event_dispatcher,
    create_event_handler,
)

__all__ = [
    "BrokerDelivery",
    "DeliveryStrategy",
    "DispatcherDelivery",
    "DomainEngine",
    "EventHandlerDelivery",
    "ExecutionResult",
    "NoDelivery",
    "build_delivery",
    "create_bounded_context_model",
    "create_command_engine",
    "create_domain_execution_engine",
    "create_event_dispatcher",
    "create_event_handler",
]
