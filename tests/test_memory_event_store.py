"""Tests for InMemoryEventStore."""

from __future__ import annotations

import pytest
from orders_domain import OrderCreated, StockReserved

from ode_domain_engine.adapters.memory.event_store import InMemoryEventStore
from ode_domain_engine.ports.event_store import IdempotencyKey, IEventStore, StoredEvent
from ode_domain_engine.primitives.exceptions import DuplicateEventError


def _stored(
    event: OrderCreated | StockReserved, context_key: str = "orders"
) -> StoredEvent:
    return StoredEvent.from_event(event, context_key)


@pytest.mark.asyncio
class TestInMemoryEventStore:
    """Test InMemoryEventStore storage, positions and idempotency records."""

    @pytest.fixture
    def store(self) -> InMemoryEventStore:
        """Create fresh event store for each test."""
        return InMemoryEventStore()

    async def test_append_assigns_positions_in_order(
        self, store: InMemoryEventStore
    ) -> None:
        first, second = OrderCreated(order_id=1), StockReserved(order_id=1)

        await store.append([_stored(first), _stored(second)], "orders")

        events = await store.get_events("orders")
        assert [e.event_id for e in events] == [first.event_id, second.event_id]
        assert [e.position for e in events] == [0, 1]
        assert events[0].event is first

    async def test_get_events_filters_by_context(
        self, store: InMemoryEventStore
    ) -> None:
        await store.append([_stored(OrderCreated(order_id=1))], "orders")
        await store.append([_stored(OrderCreated(order_id=2), "billing")], "billing")

        assert len(await store.get_events("orders")) == 1
        assert len(await store.get_events("billing")) == 1
        assert [e.position for e in await store.get_all()] == [0, 1]

    async def test_duplicate_key_rejects_whole_batch(
        self, store: InMemoryEventStore
    ) -> None:
        existing = OrderCreated(order_id=1)
        await store.append([_stored(existing)], "orders")

        with pytest.raises(DuplicateEventError) as exc_info:
            await store.append(
                [_stored(StockReserved(order_id=1)), _stored(existing)], "orders"
            )

        assert exc_info.value.key == IdempotencyKey("orders", existing.event_id)
        assert len(store) == 1

    async def test_duplicate_within_batch_is_rejected(
        self, store: InMemoryEventStore
    ) -> None:
        event = OrderCreated(order_id=1)

        with pytest.raises(DuplicateEventError):
            await store.append([_stored(event), _stored(event)], "orders")

        assert len(store) == 0

    async def test_same_event_id_allowed_in_other_context(
        self, store: InMemoryEventStore
    ) -> None:
        event = OrderCreated(order_id=1)

        await store.append([_stored(event)], "orders")
        await store.append([_stored(event, "billing")], "billing")

        assert len(store) == 2

    async def test_has_record_covers_events_and_markers(
        self, store: InMemoryEventStore
    ) -> None:
        event = OrderCreated(order_id=1)
        await store.append([_stored(event)], "orders")
        marker = IdempotencyKey("orders.event-handlers", "evt-1")

        assert await store.has_record(IdempotencyKey("orders", event.event_id))
        assert not await store.has_record(marker)

        await store.mark_handled(marker)

        assert await store.has_record(marker)
        assert len(store) == 1

    async def test_clear(self, store: InMemoryEventStore) -> None:
        event = OrderCreated(order_id=1)
        await store.append([_stored(event)], "orders")
        await store.mark_handled(IdempotencyKey("x", "y"))

        store.clear()

        assert len(store) == 0
        assert not await store.has_record(IdempotencyKey("orders", event.event_id))
        assert store.handled == frozenset()


def test_satisfies_event_store_port() -> None:
    assert isinstance(InMemoryEventStore(), IEventStore)


def test_idempotency_key_str() -> None:
    assert str(IdempotencyKey("orders", "abc")) == "orders:abc"
