"""SQLAlchemy ORM models for the seasonpass store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class StorageItemRow(Base):
    """Key-value store backing the extension's local storage.

    Values are JSON so integers (season hashes, epoch-ms timestamps) and
    strings (the API key) round-trip with their types intact.
    """

    __tablename__ = "storage_items"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
