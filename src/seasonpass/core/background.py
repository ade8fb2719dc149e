"""Background worker shell.

Connects the pure decision functions to their I/O: fetches a fresh store
snapshot per event, applies the reducer's write intents, writes harvested
credentials and publishes ``tabs.reload`` when the reload policy fires.

One ``Background`` lives on ``app.state`` for the life of the process; it
owns the ``ReloadGate``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any
from urllib.parse import urlsplit

from seasonpass.core.credentials import capture_credential
from seasonpass.core.event_bus import TABS_RELOAD, EventBus
from seasonpass.core.expiry import now_ms
from seasonpass.core.intercept import decide_image_request, decide_settings_request
from seasonpass.core.reload import ReloadGate
from seasonpass.core.seasons import SEASONS
from seasonpass.core.store import OverrideStore, StorageChanges
from seasonpass.core.sync import changes_to_values, reconcile
from seasonpass.models.constants import (
    PLATFORM_API_PREFIX,
    PLATFORM_ORIGIN,
    RELOAD_TAB_PATH,
    SEASON_OVERRIDE_KEY,
    SETTINGS_PATH_PREFIX,
)
from seasonpass.models.decision import PASS, InterceptDecision
from seasonpass.models.season import OverrideState, SeasonRecord, as_int

logger = logging.getLogger(__name__)


def _origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


class Background:
    """Event handlers for storage changes and intercepted requests."""

    def __init__(
        self,
        store: OverrideStore,
        event_bus: EventBus,
        *,
        origin: str = PLATFORM_ORIGIN,
        catalog: Sequence[SeasonRecord] = SEASONS,
        clock: Callable[[], int] = now_ms,
        reload_gate: ReloadGate | None = None,
    ) -> None:
        self.store = store
        self.event_bus = event_bus
        self.origin = origin
        self.catalog = catalog
        self.clock = clock
        self.reload_gate = reload_gate or ReloadGate()

    @property
    def reload_tab_url(self) -> str:
        return f"{self.origin}{RELOAD_TAB_PATH}"

    async def start(self) -> OverrideState:
        """Register the change listener and reconcile whatever is already stored."""
        self.store.add_listener(self.on_storage_changed)
        values = await self.store.get()
        logger.info("background: startup sync of %d stored keys", len(values))
        return await self.sync(values)

    async def sync(self, values: Mapping[str, Any]) -> OverrideState:
        """Run the reducer over *values* and apply its intent to the store."""
        current = await self.store.snapshot()
        next_state, intent = reconcile(values, current, self.clock())
        if intent.is_empty:
            return next_state
        if intent.removals:
            await self.store.remove(sorted(intent.removals))
        if intent.writes:
            await self.store.set(intent.writes)
        return next_state

    async def on_storage_changed(self, changes: StorageChanges) -> None:
        logger.debug("background: storage changed %s", sorted(changes))
        await self.sync(changes_to_values(changes))

        change = changes.get(SEASON_OVERRIDE_KEY)
        if change is None:
            return
        state = await self.store.snapshot()
        if self.reload_gate.consider(
            as_int(change.get("oldValue")),
            as_int(change.get("newValue")),
            state.api_key is not None,
            self.clock(),
        ):
            logger.info("background: requesting reload of %s", self.reload_tab_url)
            await self.event_bus.publish(TABS_RELOAD, {"url": self.reload_tab_url})

    async def on_send_headers(self, url: str, headers: Iterable[Mapping[str, Any]]) -> bool:
        """Harvest the API key from an outgoing platform API request."""
        if not self._is_platform_url(url, PLATFORM_API_PREFIX):
            return False
        write = capture_credential(url, headers)
        if write is None:
            return False
        logger.info("background: grabbed API key from request to %s", urlsplit(url).path)
        await self.store.set(write.to_store())
        return True

    async def on_image_request(self, url: str) -> InterceptDecision:
        if _origin_of(url) != self.origin:
            return PASS
        state = await self.store.snapshot()
        return decide_image_request(urlsplit(url).path, state, self.catalog, self.clock())

    async def on_settings_request(self, url: str) -> InterceptDecision:
        if not self._is_platform_url(url, SETTINGS_PATH_PREFIX):
            return PASS
        state = await self.store.snapshot()
        return decide_settings_request(url, state, self.clock())

    def _is_platform_url(self, url: str, path_prefix: str) -> bool:
        return _origin_of(url) == self.origin and urlsplit(url).path.startswith(path_prefix)
