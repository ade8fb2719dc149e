"""Shared test fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from seasonpass.config import Settings
from seasonpass.core.background import Background
from seasonpass.core.event_bus import EventBus
from seasonpass.core.store import OverrideStore
from seasonpass.db.engine import create_engine, create_tables
from seasonpass.models.season import to_epoch_ms

NOW = to_epoch_ms(datetime(2026, 10, 19, 12, 0, tzinfo=UTC))


class FakeClock:
    """Settable epoch-ms clock for the background shell."""

    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(seasonpass_env="development", database_url="sqlite+aiosqlite:///:memory:")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables."""
    eng = create_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def store(engine: AsyncEngine, event_bus: EventBus) -> OverrideStore:
    return OverrideStore(engine, event_bus)


@pytest.fixture
def background(store: OverrideStore, event_bus: EventBus, clock: FakeClock) -> Background:
    """Background shell with a fake clock; call ``start()`` in the test when needed."""
    return Background(store, event_bus, clock=clock)
