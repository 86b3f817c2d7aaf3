"""IEventStore protocol + StoredEvent / IdempotencyKey dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..utils import default_dict_factory

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..domain.events import DomainEvent


@dataclass(frozen=True)
class IdempotencyKey:
    """Deduplication key: a message identity scoped to a context.

    The engine records events under ``(<bounded context name>, event_id)``;
    the transactional event handler records its markers under its own
    context key so both never collide.
    """

    context_key: str
    message_id: str

    def __str__(self) -> str:
        return f"{self.context_key}:{self.message_id}"


@dataclass(frozen=True)
class StoredEvent:
    """Persistent representation of a domain event.

    - ``context_key``: the bounded context the event was recorded for.
    - ``position``: global append position, assigned by the store.
    - ``event``: the original domain event instance (in-process stores only).
    """

    event_id: str
    event_type: str
    context_key: str
    payload: dict[str, object] = field(default_factory=default_dict_factory)
    metadata: dict[str, object] = field(default_factory=default_dict_factory)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: str | None = None
    causation_id: str | None = None
    position: int | None = None
    event: DomainEvent | None = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> IdempotencyKey:
        return IdempotencyKey(self.context_key, self.event_id)

    @classmethod
    def from_event(cls, event: DomainEvent, context_key: str) -> StoredEvent:
        return cls(
            event_id=event.event_id,
            event_type=event.event_type,
            context_key=context_key,
            payload=event.payload(),
            metadata=dict(event.metadata),
            occurred_at=event.occurred_at,
            correlation_id=event.correlation_id,
            causation_id=event.causation_id,
            event=event,
        )


@runtime_checkable
class IEventStore(Protocol):
    """Protocol for the append-only event store the engine persists into.

    The store owns its own concurrency discipline; the engine performs no
    locking around it.
    """

    async def append(self, events: Sequence[StoredEvent], context_key: str) -> None:
        """Append *events* for *context_key* atomically, in order.

        Must raise (typically ``EventStoreError``) and retain nothing if any
        event cannot be stored, including when its idempotency key is already
        recorded.
        """
        ...

    async def has_record(self, key: IdempotencyKey) -> bool:
        """Return True if an event or a handled-marker exists for *key*."""
        ...

    async def mark_handled(self, key: IdempotencyKey) -> None:
        """Record that the message identified by *key* has been handled."""
        ...

    async def get_events(self, context_key: str) -> list[StoredEvent]:
        """Return the events recorded for *context_key* in append order."""
        ...

    async def get_all(self) -> list[StoredEvent]:
        """Return every stored event in append order."""
        ...
