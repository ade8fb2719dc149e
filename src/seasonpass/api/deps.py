"""FastAPI dependency injection for the store and the background shell."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from seasonpass.core.background import Background
from seasonpass.core.store import OverrideStore


async def get_background(request: Request) -> Background:
    """Get the background shell from app state."""
    return request.app.state.background


async def get_store(
    background: Annotated[Background, Depends(get_background)],
) -> OverrideStore:
    return background.store


BackgroundDep = Annotated[Background, Depends(get_background)]
StoreDep = Annotated[OverrideStore, Depends(get_store)]
