"""Credential capture from outgoing platform API requests.

The platform's web client sends its API key in an ``x-api-key`` header.
Harvesting it lets the settings redirect target call the API on the user's
behalf. Requests this system issued itself are skipped so they never feed
back into the store.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlsplit

from seasonpass.models.constants import API_KEY_HEADER, API_KEY_KEY, SELF_REQUEST_MARKER


@dataclass(frozen=True)
class CredentialWrite:
    """Instruction to store a harvested API key."""

    api_key: str

    def to_store(self) -> dict[str, str]:
        return {API_KEY_KEY: self.api_key}


def is_self_request(url: str) -> bool:
    """True when *url* carries the self-request query marker.

    Matches both a bare marker (``?seasonPassPass``) and a marker with a value.
    """
    query = urlsplit(url).query
    if not query:
        return False
    return any(name == SELF_REQUEST_MARKER for name, _ in parse_qsl(query, keep_blank_values=True))


def _header_value(headers: Iterable[Mapping[str, str | None]], name: str) -> str | None:
    wanted = name.lower()
    for header in headers:
        header_name = header.get("name")
        if header_name and header_name.lower() == wanted:
            return header.get("value")
    return None


def capture_credential(
    url: str,
    headers: Iterable[Mapping[str, str | None]],
) -> CredentialWrite | None:
    """Return a write for the request's API key, or None.

    Nothing is captured when the header is missing or empty, or when the
    request is one of this system's own. Capturing the same key twice is
    harmless; a newer key always overwrites an older one.
    """
    value = _header_value(headers, API_KEY_HEADER)
    if not value:
        return None
    if is_self_request(url):
        return None
    return CredentialWrite(api_key=value)
