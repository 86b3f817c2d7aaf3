"""InMemoryEventStore — list-backed event store for tests and single-process use."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from ...ports.event_store import IdempotencyKey, IEventStore, StoredEvent
from ...primitives.exceptions import DuplicateEventError

if TYPE_CHECKING:
    from collections.abc import Sequence


class InMemoryEventStore(IEventStore):
    """In-memory implementation of ``IEventStore``.

    Events are kept in one flat list in append order; each gets the next
    global position. A batch is validated in full before anything is stored,
    so a duplicate key anywhere in it leaves the store unchanged.
    Handled-markers live in a separate set.
    """

    def __init__(self) -> None:
        self._events: list[StoredEvent] = []
        self._keys: set[IdempotencyKey] = set()
        self._handled: set[IdempotencyKey] = set()

    async def append(self, events: Sequence[StoredEvent], context_key: str) -> None:
        batch = [dataclasses.replace(e, context_key=context_key) for e in events]
        seen: set[IdempotencyKey] = set()
        for stored in batch:
            if stored.key in self._keys or stored.key in seen:
                raise DuplicateEventError(stored.key)
            seen.add(stored.key)

        start = len(self._events)
        for offset, stored in enumerate(batch):
            self._events.append(dataclasses.replace(stored, position=start + offset))
        self._keys.update(seen)

    async def has_record(self, key: IdempotencyKey) -> bool:
        return key in self._keys or key in self._handled

    async def mark_handled(self, key: IdempotencyKey) -> None:
        self._handled.add(key)

    async def get_events(self, context_key: str) -> list[StoredEvent]:
        return [e for e in self._events if e.context_key == context_key]

    async def get_all(self) -> list[StoredEvent]:
        return list(self._events)

    # ── Test helpers ─────────────────────────────────────────────

    @property
    def handled(self) -> frozenset[IdempotencyKey]:
        return frozenset(self._handled)

    def clear(self) -> None:
        self._events.clear()
        self._keys.clear()
        self._handled.clear()

    def __len__(self) -> int:
        return len(self._events)
