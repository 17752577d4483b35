"""SQLModel table definitions for the persisted registry state."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlmodel import Field, SQLModel

TICKET_COUNTER_NAME = "next_ticket_id"


def _utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


class TicketTable(SQLModel, table=True):
    """One row per issued ticket; rows are never deleted."""

    __tablename__ = "registry_tickets"

    id: int = Field(sa_column=Column(Integer, primary_key=True, autoincrement=False))
    info: str = Field(sa_column=Column(Text, nullable=False))
    owner: str | None = Field(default=None, sa_column=Column(String(255), nullable=True))
    cancelled: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class BatchMetadataTable(SQLModel, table=True):
    """Batch provenance keyed by ticket id, kept apart from the ticket rows."""

    __tablename__ = "registry_batch_metadata"

    ticket_id: int = Field(sa_column=Column(Integer, primary_key=True, autoincrement=False))
    value: str = Field(sa_column=Column(Text, nullable=False))


class CounterTable(SQLModel, table=True):
    """Named monotonic counters; holds the ticket id allocator."""

    __tablename__ = "registry_counters"

    name: str = Field(sa_column=Column(String(64), primary_key=True))
    value: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
