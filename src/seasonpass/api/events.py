"""SSE (Server-Sent Events) endpoint the extension listens on for tab reloads."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from seasonpass.api.deps import BackgroundDep
from seasonpass.core.event_bus import EVENT_TYPES

router = APIRouter(prefix="/api/events", tags=["events"])
logger = logging.getLogger(__name__)

_HEARTBEAT_INTERVAL = 15  # seconds

# One stream per open extension instance; a handful is normal.
_MAX_SSE_CONNECTIONS = 20
_connection_semaphore = asyncio.Semaphore(_MAX_SSE_CONNECTIONS)


@router.get("/stream")
async def sse_stream(
    request: Request,
    background: BackgroundDep,
    event_type: str | None = None,
) -> StreamingResponse:
    """Server-Sent Events stream of ``storage.changed`` and ``tabs.reload``.

    Query params:
        event_type: optional filter, one of the known event types.

    Errors:
        400: unknown event_type value
        429: connection limit reached
    """
    if event_type is not None and event_type not in EVENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown event_type {event_type!r}. Valid values: {sorted(EVENT_TYPES)}",
        )

    if _connection_semaphore.locked():
        raise HTTPException(
            status_code=429,
            detail=f"Too many concurrent SSE connections (limit: {_MAX_SSE_CONNECTIONS}).",
        )

    bus = background.event_bus

    async def generate():
        async with _connection_semaphore:
            yield ": connected\n\n"
            async with bus.subscribe(event_type) as sub:
                while not await request.is_disconnected():
                    event = await sub.get(timeout=_HEARTBEAT_INTERVAL)
                    if event is None:
                        yield ": heartbeat\n\n"
                        continue
                    data = json.dumps(event, default=str)
                    yield f"event: {event['type']}\ndata: {data}\n\n"

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/health")
async def events_health(background: BackgroundDep) -> dict:
    return {
        "status": "ok",
        "subscribers": background.event_bus.subscriber_count,
        "max_sse_connections": _MAX_SSE_CONNECTIONS,
    }
