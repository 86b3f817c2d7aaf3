from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..domain.events import DomainEvent


@runtime_checkable
class IEventQueueWriter(Protocol):
    """Sink for fire-and-forget event egress (e.g. a message queue).

    Called once per persisted event, after the cascade has committed. Its
    failures are logged by the engine and never roll anything back.
    """

    async def write(self, event: DomainEvent) -> None:
        ...
