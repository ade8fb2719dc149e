"""Reload trigger policy.

After the override changes, open season-progress tabs are reloaded so they
pick up the new season. Storage changes tend to arrive in bursts, so reloads
are rate-limited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from seasonpass.models.constants import RELOAD_DEBOUNCE_MS

logger = logging.getLogger(__name__)


def should_reload(
    previous_override: int | None,
    new_override: int | None,
    has_api_key: bool,
    now: int,
    last_reload_at: int,
    debounce_ms: int = RELOAD_DEBOUNCE_MS,
) -> bool:
    """Return True when an override change warrants reloading tabs.

    Requires an API key, a positive new override that differs from the
    previous one, and at least *debounce_ms* since the last reload.
    """
    if not has_api_key:
        return False
    if new_override is None or new_override <= 0:
        return False
    if new_override == previous_override:
        return False
    return now - last_reload_at >= debounce_ms


@dataclass
class ReloadGate:
    """Holds the time of the last reload. Owned by the shell, one per process."""

    last_reload_at: int = 0

    def consider(
        self,
        previous_override: int | None,
        new_override: int | None,
        has_api_key: bool,
        now: int,
    ) -> bool:
        """Apply ``should_reload`` and record *now* when it fires."""
        if not should_reload(
            previous_override, new_override, has_api_key, now, self.last_reload_at
        ):
            logger.debug(
                "reload: skipped (override %s -> %s, %d ms since last reload)",
                previous_override,
                new_override,
                now - self.last_reload_at,
            )
            return False
        self.last_reload_at = now
        return True
