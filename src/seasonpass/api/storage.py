"""Storage endpoints: the settings UI reads and writes the override here."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, HTTPException, Query
from pydantic import BaseModel

from seasonpass.api.deps import StoreDep
from seasonpass.models.season import OverrideState

router = APIRouter(prefix="/api/storage", tags=["storage"])


class StorageResponse(BaseModel):
    values: dict[str, Any]
    state: OverrideState


class ChangesResponse(BaseModel):
    """Keys whose value changed, in change-notification shape."""

    changes: dict[str, dict[str, Any]]


@router.get("", response_model=StorageResponse)
async def get_storage(
    store: StoreDep,
    keys: Annotated[list[str] | None, Query()] = None,
) -> StorageResponse:
    values = await store.get(keys)
    return StorageResponse(values=values, state=OverrideState.from_store(values))


@router.put("", response_model=ChangesResponse)
async def put_storage(
    store: StoreDep,
    values: Annotated[dict[str, Any], Body()],
) -> ChangesResponse:
    """Write values. The settings UI sends ``seasonHash`` and ``lastChangedDate``."""
    if not values:
        raise HTTPException(status_code=422, detail="No values to store.")
    changes = await store.set(values)
    return ChangesResponse(changes=changes)


@router.delete("", response_model=ChangesResponse)
async def delete_storage(
    store: StoreDep,
    keys: Annotated[list[str], Query()],
) -> ChangesResponse:
    changes = await store.remove(keys)
    return ChangesResponse(changes=changes)
