"""Event delivery: handler bases, dispatcher, broker, transactional handler."""

from __future__ import annotations

from .broker import DomainBroker
from .event_dispatcher import EventDispatcher
from .event_handler import ContextEventHandler
from .handler import CommandHandler, EventHandler
from .transactional import TransactionalEventHandler

__all__ = [
    "CommandHandler",
    "ContextEventHandler",
    "DomainBroker",
    "EventDispatcher",
    "EventHandler",
    "TransactionalEventHandler",
]
