"""Storage synchronization reducer.

Reconciles a set of incoming store values against the current override
state. The reducer performs no I/O: it returns the next state and a
``StoreIntent`` describing the writes and removals the caller should apply.

Only three keys are recognized: ``seasonHash`` (normalized to a numeric
``seasonOverride``), ``apiKey`` and ``lastChangedDate``. ``seasonOverride``
itself is not an input, so the reducer's own writes coming back as change
notifications produce no further writes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from seasonpass.core.expiry import is_stale
from seasonpass.models.constants import (
    API_KEY_KEY,
    EXPIRING_KEYS,
    LAST_CHANGED_DATE_KEY,
    SEASON_HASH_KEY,
    SEASON_OVERRIDE_KEY,
)
from seasonpass.models.season import OverrideState, as_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreIntent:
    """Writes and removals the shell should apply to the store."""

    writes: dict[str, Any] = field(default_factory=dict)
    removals: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.writes and not self.removals


def changes_to_values(changes: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Flatten a change notification into ``{key: newValue}``.

    Keys that were removed (no ``newValue``) are left out.
    """
    return {
        key: change["newValue"]
        for key, change in changes.items()
        if isinstance(change, Mapping) and change.get("newValue") is not None
    }


def _normalize(incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Map recognized incoming keys to their stored form, dropping bad values."""
    normalized: dict[str, Any] = {}

    if SEASON_HASH_KEY in incoming:
        season = as_int(incoming[SEASON_HASH_KEY])
        if season:
            normalized[SEASON_OVERRIDE_KEY] = season

    if API_KEY_KEY in incoming:
        api_key = incoming[API_KEY_KEY]
        if isinstance(api_key, str) and api_key:
            normalized[API_KEY_KEY] = api_key

    if LAST_CHANGED_DATE_KEY in incoming:
        changed = as_int(incoming[LAST_CHANGED_DATE_KEY])
        if changed is not None:
            normalized[LAST_CHANGED_DATE_KEY] = changed

    return normalized


def reconcile(
    incoming: Mapping[str, Any],
    current: OverrideState,
    now: int,
) -> tuple[OverrideState, StoreIntent]:
    """Reconcile *incoming* values against *current*.

    1. If ``lastChangedDate`` arrives and is already stale, purge the season
       selection and its timestamp and apply nothing else.
    2. Otherwise stage a write for each recognized key whose normalized value
       differs from the current state.

    Re-applying the same *incoming* to the returned state yields no writes.
    """
    if LAST_CHANGED_DATE_KEY in incoming and is_stale(incoming[LAST_CHANGED_DATE_KEY], now):
        logger.info("sync: last change is stale, clearing %s", sorted(EXPIRING_KEYS))
        next_state = current.model_copy(
            update={"season_override": None, "last_changed_date": None}
        )
        return next_state, StoreIntent(removals=EXPIRING_KEYS)

    stored = current.to_store()
    writes = {
        key: value for key, value in _normalize(incoming).items() if stored.get(key) != value
    }
    if not writes:
        return current, StoreIntent()

    for key in writes:
        logger.debug("sync: staging %s", key)
    next_state = OverrideState.from_store({**stored, **writes})
    return next_state, StoreIntent(writes=writes)
