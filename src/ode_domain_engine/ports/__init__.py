from .event_queue import IEventQueueWriter
from .event_store import IdempotencyKey, IEventStore, StoredEvent
from .handlers import ICommandHandler, IEventBroker, IEventDispatcher, IEventHandler
from .middleware import IMiddleware
from .unit_of_work import UnitOfWork

__all__ = [
    "ICommandHandler",
    "IEventBroker",
    "IEventDispatcher",
    "IEventHandler",
    "IEventQueueWriter",
    "IEventStore",
    "IMiddleware",
    "IdempotencyKey",
    "StoredEvent",
    "UnitOfWork",
]
