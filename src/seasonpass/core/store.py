"""Override state store: persistent key-value storage with change notifications.

Mirrors the browser extension storage contract: ``get``/``set``/``remove``
plus listeners that receive ``{key: {"oldValue": ..., "newValue": ...}}``
for every key whose value actually changed. A removed key's change has no
``newValue``.

Once the write is committed the changed key names are published on the event
bus as ``storage.changed``, then listeners are awaited in registration order.
A listener that writes to the store publishes its own event after the one
that triggered it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine

from seasonpass.core.event_bus import STORAGE_CHANGED, EventBus
from seasonpass.db.engine import get_session
from seasonpass.db.repository import Repository
from seasonpass.models.season import OverrideState

logger = logging.getLogger(__name__)

StorageChanges = dict[str, dict[str, Any]]
ChangeListener = Callable[[StorageChanges], Awaitable[None]]


class OverrideStore:
    """Async key-value store over the ``storage_items`` table."""

    def __init__(self, engine: AsyncEngine, event_bus: EventBus | None = None) -> None:
        self._engine = engine
        self._event_bus = event_bus
        self._listeners: list[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    async def get(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        """Return stored values for *keys* (all keys when None)."""
        async with get_session(self._engine) as session:
            return await Repository(session).get_items(keys)

    async def snapshot(self) -> OverrideState:
        """Fetch a fresh override state snapshot."""
        return OverrideState.from_store(await self.get())

    async def set(self, values: Mapping[str, Any]) -> StorageChanges:
        """Write *values* and notify listeners about the keys that changed."""
        if not values:
            return {}
        async with get_session(self._engine) as session:
            repo = Repository(session)
            before = await repo.get_items(values.keys())
            changes: StorageChanges = {}
            for key, value in values.items():
                if key in before and before[key] == value:
                    continue
                change: dict[str, Any] = {"newValue": value}
                if key in before:
                    change["oldValue"] = before[key]
                changes[key] = change
            if changes:
                await repo.set_items({key: values[key] for key in changes})
        await self._notify(changes)
        return changes

    async def remove(self, keys: Iterable[str]) -> StorageChanges:
        """Remove *keys* and notify listeners about the ones that existed."""
        keys = list(keys)
        if not keys:
            return {}
        async with get_session(self._engine) as session:
            repo = Repository(session)
            before = await repo.get_items(keys)
            if before:
                await repo.remove_items(before.keys())
        changes: StorageChanges = {key: {"oldValue": value} for key, value in before.items()}
        await self._notify(changes)
        return changes

    async def _notify(self, changes: StorageChanges) -> None:
        if not changes:
            return
        logger.debug("store: changed %s", sorted(changes))
        if self._event_bus is not None:
            # Key names only; values include the API key.
            await self._event_bus.publish(STORAGE_CHANGED, {"keys": sorted(changes)})
        for listener in list(self._listeners):
            await listener(changes)
