"""Repository pattern for store access.

Wraps SQLAlchemy async sessions. The store is a flat key-value table; the
repository knows nothing about which keys are meaningful.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from seasonpass.db.models import StorageItemRow


class Repository:
    """Async repository for storage items."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_items(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        """Return stored values, all of them when *keys* is None.

        Keys that are not stored are simply absent from the result.
        """
        stmt = select(StorageItemRow)
        if keys is not None:
            stmt = stmt.where(StorageItemRow.key.in_(list(keys)))
        result = await self.session.execute(stmt)
        return {row.key: row.value for row in result.scalars().all()}

    async def set_items(self, values: Mapping[str, Any]) -> None:
        """Upsert every key-value pair in *values*."""
        for key, value in values.items():
            row = await self.session.get(StorageItemRow, key)
            if row is not None:
                row.value = value
            else:
                self.session.add(StorageItemRow(key=key, value=value))
        await self.session.flush()

    async def remove_items(self, keys: Iterable[str]) -> None:
        await self.session.execute(
            delete(StorageItemRow).where(StorageItemRow.key.in_(list(keys)))
        )
        await self.session.flush()
