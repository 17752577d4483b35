from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

TicketId = int


class BatchPolicy(str, Enum):
    """How a batch issuance treats invalid entries."""

    ATOMIC = "atomic"
    BEST_EFFORT = "best_effort"


@dataclass(slots=True)
class Ticket:
    """A uniquely numbered admission right tracked by the ledger."""

    id: TicketId
    info: str
    owner: str | None
    cancelled: bool = False

    @property
    def active(self) -> bool:
        return not self.cancelled


@dataclass(slots=True, frozen=True)
class RejectedItem:
    """Batch entry skipped during a best-effort issuance."""

    index: int
    info: str
    reason: str


@dataclass(slots=True)
class BatchIssueResult:
    """Outcome of a batch issuance.

    ``ticket_ids`` follows input order and only lists issued entries; ``rejected``
    is always empty for atomic batches.
    """

    ticket_ids: list[TicketId] = field(default_factory=list)
    rejected: list[RejectedItem] = field(default_factory=list)

    @property
    def issued_count(self) -> int:
        return len(self.ticket_ids)


class TicketRecord(BaseModel):
    """Serialisable form of a :class:`Ticket`."""

    id: TicketId = Field(..., ge=1)
    info: str = Field(..., min_length=1)
    owner: str | None = None
    cancelled: bool = False


class RegistrySnapshot(BaseModel):
    """Serialisable view of the persisted registry state."""

    admin: str
    last_ticket_id: int = Field(..., ge=0)
    tickets: list[TicketRecord] = Field(default_factory=list)
    batch_metadata: dict[TicketId, str] = Field(default_factory=dict)
