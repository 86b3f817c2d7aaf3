"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
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
    "CascadeDepthExceededError",
    "DomainConfigurationError",
    "DomainEngineError",
    "DuplicateEventError",
    "EventHandlerFailureError",
    "EventStoreError",
    "HandlerError",
    "HandlerRegistrationError",
    "IdempotencyCheckError",
    "PersistenceFailureError",
    "UnregisteredHandlerError",
]
