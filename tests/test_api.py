"""Tests for the HTTP surface the extension talks to."""

import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

import seasonpass.api.events as events_module
from seasonpass.api.events import sse_stream
from seasonpass.config import Settings
from seasonpass.core.background import Background
from seasonpass.core.seasons import SEASONS
from seasonpass.core.event_bus import TABS_RELOAD
from seasonpass.main import create_app, lifespan
from seasonpass.models.constants import SETTINGS_REDIRECT_ENDPOINT

ORIGIN = "https://www.bungie.net"
OLD, NEW = SEASONS[0], SEASONS[-1]


@pytest.fixture
async def client(settings: Settings, background: Background) -> AsyncGenerator[AsyncClient, None]:
    """Test app with the background shell wired up (lifespan run manually)."""
    app = create_app(settings)
    await background.start()
    app.state.background = background

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "env": "development"}

    async def test_events_health(self, client: AsyncClient) -> None:
        resp = await client.get("/api/events/health")
        assert resp.status_code == 200
        assert resp.json()["subscribers"] == 0


class TestStorageAPI:
    async def test_put_then_get(self, client: AsyncClient, clock) -> None:
        resp = await client.put(
            "/api/storage", json={"seasonHash": str(NEW.hash), "lastChangedDate": clock.now}
        )
        assert resp.status_code == 200
        assert set(resp.json()["changes"]) == {"seasonHash", "lastChangedDate"}

        resp = await client.get("/api/storage")
        assert resp.status_code == 200
        body = resp.json()
        assert body["values"]["seasonOverride"] == NEW.hash
        assert body["state"]["season_override"] == NEW.hash
        assert body["state"]["last_changed_date"] == clock.now

    async def test_get_subset(self, client: AsyncClient) -> None:
        await client.put("/api/storage", json={"apiKey": "k", "debug": "*"})
        resp = await client.get("/api/storage", params={"keys": ["apiKey"]})
        assert resp.json()["values"] == {"apiKey": "k"}

    async def test_put_empty_is_rejected(self, client: AsyncClient) -> None:
        resp = await client.put("/api/storage", json={})
        assert resp.status_code == 422

    async def test_put_non_object_is_rejected(self, client: AsyncClient) -> None:
        resp = await client.put("/api/storage", json=["seasonHash"])
        assert resp.status_code == 422

    async def test_delete(self, client: AsyncClient) -> None:
        await client.put("/api/storage", json={"apiKey": "k"})
        resp = await client.delete("/api/storage", params={"keys": ["apiKey", "missing"]})
        assert resp.status_code == 200
        assert resp.json()["changes"] == {"apiKey": {"oldValue": "k"}}


class TestInterceptAPI:
    async def test_patterns(self, client: AsyncClient) -> None:
        resp = await client.get("/api/intercept/patterns")
        assert resp.status_code == 200
        body = resp.json()
        assert body["platform_api"] == [f"{ORIGIN}/Platform/*"]
        assert body["settings"] == [f"{ORIGIN}/Platform/Settings*"]
        assert len(body["images"]) == len(SEASONS)

    async def test_headers_capture(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/intercept/headers",
            json={
                "url": f"{ORIGIN}/Platform/Destiny2/Manifest/",
                "request_headers": [{"name": "X-API-Key", "value": "abc"}],
            },
        )
        assert resp.status_code == 200
        assert resp.json() == {"captured": True}

        stored = await client.get("/api/storage")
        assert stored.json()["values"]["apiKey"] == "abc"

    async def test_image_redirect(self, client: AsyncClient, clock) -> None:
        await client.put(
            "/api/storage", json={"seasonHash": str(NEW.hash), "lastChangedDate": clock.now}
        )
        resp = await client.post("/api/intercept/image", json={"url": f"{ORIGIN}{OLD.image_path}"})
        assert resp.status_code == 200
        assert resp.json() == {"redirectUrl": f"{ORIGIN}{NEW.image_path}"}

    async def test_image_already_correct(self, client: AsyncClient, clock) -> None:
        await client.put(
            "/api/storage", json={"seasonHash": str(NEW.hash), "lastChangedDate": clock.now}
        )
        resp = await client.post("/api/intercept/image", json={"url": f"{ORIGIN}{NEW.image_path}"})
        assert resp.json() == {}

    async def test_settings_redirect(self, client: AsyncClient, clock) -> None:
        await client.put(
            "/api/storage", json={"seasonHash": str(NEW.hash), "lastChangedDate": clock.now}
        )
        resp = await client.post(
            "/api/intercept/settings", json={"url": f"{ORIGIN}/Platform/Settings/"}
        )
        assert resp.json() == {"redirectUrl": f"{SETTINGS_REDIRECT_ENDPOINT}?season={NEW.hash}"}

        resp = await client.post(
            "/api/intercept/settings", json={"url": f"{ORIGIN}/Platform/Settings?seasonPassPass"}
        )
        assert resp.json() == {}

    @pytest.mark.parametrize("url", ["not a url", "/relative/path.jpg", "ftp://host/x.jpg"])
    async def test_unparsable_url_rejected(self, client: AsyncClient, url: str) -> None:
        resp = await client.post("/api/intercept/image", json={"url": url})
        assert resp.status_code == 422


class TestEventsAPI:
    async def test_unknown_event_type_rejected(self, client: AsyncClient) -> None:
        resp = await client.get("/api/events/stream", params={"event_type": "game.completed"})
        assert resp.status_code == 400

    async def test_429_when_connection_limit_reached(self, client: AsyncClient) -> None:
        """Hold the only slot, the next stream request is turned away."""
        original_limit = events_module._MAX_SSE_CONNECTIONS
        original_semaphore = events_module._connection_semaphore

        events_module._MAX_SSE_CONNECTIONS = 1
        events_module._connection_semaphore = asyncio.Semaphore(1)

        try:
            await events_module._connection_semaphore.acquire()
            resp = await client.get("/api/events/stream")
            assert resp.status_code == 429
            assert "limit: 1" in resp.json()["detail"]
        finally:
            events_module._MAX_SSE_CONNECTIONS = original_limit
            events_module._connection_semaphore = original_semaphore

    async def test_tabs_reload_reaches_stream(self, background: Background, store, clock) -> None:
        """A new selection with a stored API key is pushed to the stream."""

        class _ConnectedRequest:
            async def is_disconnected(self) -> bool:
                return False

        await background.start()
        await store.set({"apiKey": "k"})

        response = await sse_stream(_ConnectedRequest(), background, event_type=TABS_RELOAD)
        chunks = response.body_iterator
        try:
            assert await anext(chunks) == ": connected\n\n"

            pending = asyncio.create_task(anext(chunks))
            while background.event_bus.subscriber_count == 0:
                await asyncio.sleep(0)
            await store.set({"seasonHash": str(NEW.hash), "lastChangedDate": clock.now})

            chunk = await asyncio.wait_for(pending, timeout=1.0)
        finally:
            await chunks.aclose()

        assert chunk.startswith(f"event: {TABS_RELOAD}\n")
        assert f"{ORIGIN}/7/en/Seasons/PreviousSeason" in chunk


class TestLifespan:
    async def test_startup_wires_background_only(self, settings: Settings) -> None:
        app = create_app(settings)
        async with lifespan(app):
            assert isinstance(app.state.background, Background)
            assert not hasattr(app.state, "engine")
