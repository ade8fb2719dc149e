"""Shared constants for seasonpass.

Placed here so the core decision functions, the store and the API layer
can import them without creating a layer violation.
"""

from __future__ import annotations

# Storage keys
SEASON_OVERRIDE_KEY = "seasonOverride"
SEASON_HASH_KEY = "seasonHash"  # write-only alias sent by the settings UI
API_KEY_KEY = "apiKey"
LAST_CHANGED_DATE_KEY = "lastChangedDate"

# Keys removed when the override expires. apiKey survives expiry. The
# seasonHash alias goes too, otherwise the next startup sync would restore
# the override without a timestamp.
EXPIRING_KEYS: frozenset[str] = frozenset(
    {SEASON_OVERRIDE_KEY, SEASON_HASH_KEY, LAST_CHANGED_DATE_KEY}
)

# An override older than this (epoch-ms delta) is treated as expired.
STALE_INTERVAL_MS = 60 * 60 * 1000

# Minimum gap between two tab reloads.
RELOAD_DEBOUNCE_MS = 2000

# Header the platform's own web client uses to authenticate API calls.
API_KEY_HEADER = "x-api-key"

# Query marker carried by requests this system issues itself.
SELF_REQUEST_MARKER = "seasonPassPass"

PLATFORM_ORIGIN = "https://www.bungie.net"
PLATFORM_API_PREFIX = "/Platform/"
SETTINGS_PATH_PREFIX = "/Platform/Settings"
RELOAD_TAB_PATH = "/7/en/Seasons/PreviousSeason"

# Downstream endpoint that builds a season-specific Settings response.
SETTINGS_REDIRECT_ENDPOINT = "https://destiny-activities.destinyreport.workers.dev/seasonPassPass"
