"""Domain Event base class."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

#: Metadata key under which the engine records how deep in the cascade an
#: event was produced (0 = produced by the externally submitted command).
CASCADE_DEPTH_KEY = "cascade_depth"


class DomainEvent(BaseModel):
    """Base class for all Domain Events.

    Events are immutable facts. ``event_id`` is the stable identity used for
    idempotency: the event store never records the same ``event_id`` twice
    for one context, and the transactional event handler keys its markers on
    it. Subclasses add their payload as ordinary fields::

        class OrderCreated(DomainEvent):
            order_id: int

    ``causation_id`` links the event to the command that produced it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 1
    metadata: dict[str, object] = Field(default_factory=dict)
    correlation_id: str | None = None
    causation_id: str | None = None

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def payload(self) -> dict[str, object]:
        """Return the subclass fields (everything but the envelope)."""
        return self.model_dump(exclude=set(DomainEvent.model_fields))


def enrich_event_metadata(
    event: DomainEvent,
    *,
    correlation_id: str | None = None,
    causation_id: str | None = None,
    depth: int | None = None,
) -> DomainEvent:
    """Return a copy of *event* with tracing IDs injected.

    If the event already carries the requested ID the original value is kept.
    """
    updates: dict[str, object] = {}
    if correlation_id and not event.correlation_id:
        updates["correlation_id"] = correlation_id
    if causation_id and not event.causation_id:
        updates["causation_id"] = causation_id
    if depth is not None and event.metadata.get(CASCADE_DEPTH_KEY) != depth:
        updates["metadata"] = {**event.metadata, CASCADE_DEPTH_KEY: depth}

    if not updates:
        return event

    return event.model_copy(update=updates)
