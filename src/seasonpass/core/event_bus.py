"""In-memory async event bus for outbound notifications.

The store publishes ``storage.changed`` after every effective write and the
background shell publishes ``tabs.reload`` when open season pages should be
refreshed. SSE endpoints subscribe and forward events to the extension.
Delivery is fire-and-forget: with no subscribers, events are dropped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)

STORAGE_CHANGED = "storage.changed"
TABS_RELOAD = "tabs.reload"

EVENT_TYPES: frozenset[str] = frozenset({STORAGE_CHANGED, TABS_RELOAD})

Envelope = dict[str, Any]


class EventBus:
    """Async pub/sub keyed by event type. ``None`` subscribes to every type.

    Usage:
        bus = EventBus()

        async with bus.subscribe(TABS_RELOAD) as sub:
            event = await sub.get(timeout=15)

        await bus.publish(TABS_RELOAD, {"url": "..."})
    """

    def __init__(self) -> None:
        self._queues: dict[str | None, list[asyncio.Queue[Envelope]]] = defaultdict(list)

    async def publish(self, event_type: str, data: dict[str, Any]) -> int:
        """Deliver an event to typed and wildcard subscribers.

        Returns how many subscribers received it. Full queues drop the event.
        """
        envelope: Envelope = {"type": event_type, "data": data}
        delivered = 0
        for queue in [*self._queues.get(event_type, []), *self._queues.get(None, [])]:
            try:
                queue.put_nowait(envelope)
            except asyncio.QueueFull:
                logger.warning("event_bus: dropping %s for slow subscriber", event_type)
            else:
                delivered += 1
        return delivered

    def subscribe(self, event_type: str | None = None, max_size: int = 100) -> Subscription:
        """Create a subscription; enter it with ``async with`` to start receiving."""
        return Subscription(self, asyncio.Queue(maxsize=max_size), event_type)

    @property
    def subscriber_count(self) -> int:
        return sum(len(queues) for queues in self._queues.values())


class Subscription:
    """Async context manager and iterator over one subscriber queue."""

    def __init__(
        self,
        bus: EventBus,
        queue: asyncio.Queue[Envelope],
        event_type: str | None,
    ) -> None:
        self._bus = bus
        self._queue = queue
        self._event_type = event_type

    async def __aenter__(self) -> Subscription:
        self._bus._queues[self._event_type].append(self._queue)
        return self

    async def __aexit__(self, *args: object) -> None:
        with contextlib.suppress(ValueError):
            self._bus._queues[self._event_type].remove(self._queue)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Envelope:
        try:
            return await self._queue.get()
        except asyncio.CancelledError:
            raise StopAsyncIteration from None

    async def get(self, timeout: float | None = None) -> Envelope | None:
        """Next event, or None when *timeout* seconds pass without one."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except TimeoutError:
            return None
