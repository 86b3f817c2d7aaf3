from .event_queue import InMemoryEventQueueWriter
from .event_store import InMemoryEventStore
from .unit_of_work import InMemoryUnitOfWork, InMemoryUnitOfWorkFactory

__all__ = [
    "InMemoryEventQueueWriter",
    "InMemoryEventStore",
    "InMemoryUnitOfWork",
    "InMemoryUnitOfWorkFactory",
]
