"""Request interception endpoints called by the browser extension.

The extension registers web-request listeners for the URL patterns from
``GET /api/intercept/patterns`` and forwards each matching request here.
The response is the blocking response the listener should return: either
``{"redirectUrl": ...}`` or ``{}`` to let the request through unmodified.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlsplit

from fastapi import APIRouter
from pydantic import BaseModel, Field, field_validator

from seasonpass.api.deps import BackgroundDep
from seasonpass.core.intercept import to_blocking_response
from seasonpass.core.seasons import image_urls
from seasonpass.models.constants import PLATFORM_API_PREFIX, SETTINGS_PATH_PREFIX

router = APIRouter(prefix="/api/intercept", tags=["intercept"])
logger = logging.getLogger(__name__)


class HttpHeader(BaseModel):
    name: str
    value: str | None = None


class InterceptRequest(BaseModel):
    """An intercepted request. The URL must be absolute http(s)."""

    url: str

    @field_validator("url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            msg = f"not an absolute http(s) URL: {value!r}"
            raise ValueError(msg)
        return value


class SendHeadersRequest(InterceptRequest):
    request_headers: list[HttpHeader] = Field(default_factory=list)


class CaptureResponse(BaseModel):
    captured: bool


class PatternsResponse(BaseModel):
    """URL filters the extension should register listeners for."""

    platform_api: list[str]
    settings: list[str]
    images: list[str]


@router.get("/patterns", response_model=PatternsResponse)
async def intercept_patterns(background: BackgroundDep) -> PatternsResponse:
    origin = background.origin
    return PatternsResponse(
        platform_api=[f"{origin}{PLATFORM_API_PREFIX}*"],
        settings=[f"{origin}{SETTINGS_PATH_PREFIX}*"],
        images=image_urls(origin, background.catalog),
    )


@router.post("/headers", response_model=CaptureResponse)
async def intercept_headers(
    body: SendHeadersRequest, background: BackgroundDep
) -> CaptureResponse:
    """Observe an outgoing platform API request and harvest its API key."""
    headers = [h.model_dump() for h in body.request_headers]
    captured = await background.on_send_headers(body.url, headers)
    return CaptureResponse(captured=captured)


@router.post("/image")
async def intercept_image(body: InterceptRequest, background: BackgroundDep) -> dict[str, Any]:
    """Decide a season background image request."""
    decision = await background.on_image_request(body.url)
    return to_blocking_response(decision, background.origin)


@router.post("/settings")
async def intercept_settings(body: InterceptRequest, background: BackgroundDep) -> dict[str, Any]:
    """Decide a platform Settings request."""
    decision = await background.on_settings_request(body.url)
    return to_blocking_response(decision, background.origin)
