"""Expiry policy for the season override.

An override is only honoured for a while after it was last changed. Past
that window the stored selection is treated as expired and cleared.
"""

from __future__ import annotations

import time

from seasonpass.models.constants import STALE_INTERVAL_MS
from seasonpass.models.season import as_int


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_stale(
    last_changed_date: object,
    now: int,
    stale_interval_ms: int = STALE_INTERVAL_MS,
) -> bool:
    """Return True when *last_changed_date* is older than the stale interval.

    A missing (or non-integer) timestamp never expires.
    """
    changed = as_int(last_changed_date)
    if changed is None:
        return False
    return now - changed > stale_interval_ms
