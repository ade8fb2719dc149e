"""Season catalog records and the persisted override state."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from seasonpass.models.constants import (
    API_KEY_KEY,
    LAST_CHANGED_DATE_KEY,
    SEASON_OVERRIDE_KEY,
)


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)


def as_int(value: Any) -> int | None:
    """Return *value* as an int, or None when it is not a usable integer.

    Booleans are rejected even though ``bool`` subclasses ``int``.
    Numeric strings (the settings UI sends hashes as strings) are accepted.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class SeasonRecord(BaseModel):
    """One season in the static catalog. Never mutated after load."""

    model_config = ConfigDict(frozen=True)

    hash: int
    name: str = ""
    image_path: str
    end_date: datetime

    @property
    def end_ms(self) -> int:
        return to_epoch_ms(self.end_date)

    def has_ended(self, now: int) -> bool:
        """True when the season's end date is strictly before *now* (epoch ms)."""
        return self.end_ms < now


class OverrideState(BaseModel):
    """Snapshot of the override triple held by the store.

    Decision functions receive one of these per request and never mutate it.
    """

    model_config = ConfigDict(frozen=True)

    season_override: int | None = None
    api_key: str | None = None
    last_changed_date: int | None = None

    @classmethod
    def from_store(cls, values: Mapping[str, Any]) -> OverrideState:
        """Build a snapshot from raw store values, treating bad values as absent."""
        api_key = values.get(API_KEY_KEY)
        return cls(
            season_override=as_int(values.get(SEASON_OVERRIDE_KEY)),
            api_key=api_key if isinstance(api_key, str) and api_key else None,
            last_changed_date=as_int(values.get(LAST_CHANGED_DATE_KEY)),
        )

    def to_store(self) -> dict[str, Any]:
        """Return the store representation, omitting unset fields."""
        values: dict[str, Any] = {}
        if self.season_override is not None:
            values[SEASON_OVERRIDE_KEY] = self.season_override
        if self.api_key is not None:
            values[API_KEY_KEY] = self.api_key
        if self.last_changed_date is not None:
            values[LAST_CHANGED_DATE_KEY] = self.last_changed_date
        return values
