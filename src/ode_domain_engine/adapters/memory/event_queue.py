"""InMemoryEventQueueWriter — collects egressed events for assertions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...ports.event_queue import IEventQueueWriter

if TYPE_CHECKING:
    from ...domain.events import DomainEvent


class InMemoryEventQueueWriter(IEventQueueWriter):
    """Appends every written event to :attr:`written`, in write order."""

    def __init__(self) -> None:
        self.written: list[DomainEvent] = []

    async def write(self, event: DomainEvent) -> None:
        self.written.append(event)

    def clear(self) -> None:
        self.written.clear()
