from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from dataclasses import replace
from typing import Callable, Iterator, Mapping, Protocol, Sequence

from .models import Ticket, TicketId


class TicketLedger(Protocol):
    """Storage contract for ticket records, the id counter and batch metadata."""

    def transaction(self) -> AbstractContextManager[None]:
        ...

    def allocate_id(self) -> TicketId:
        ...

    def last_id(self) -> TicketId:
        ...

    def put(self, ticket_id: TicketId, info: str, owner: str | None) -> Ticket:
        ...

    def get(self, ticket_id: TicketId) -> Ticket | None:
        ...

    def set_owner(self, ticket_id: TicketId, owner: str | None) -> None:
        ...

    def set_cancelled(self, ticket_id: TicketId, cancelled: bool) -> None:
        ...

    def exists_active(self, ticket_id: TicketId) -> bool:
        ...

    def put_batch_metadata(self, ticket_id: TicketId, value: str) -> None:
        ...

    def get_batch_metadata(self, ticket_id: TicketId) -> str | None:
        ...

    def list_tickets(self) -> Sequence[Ticket]:
        ...

    def batch_metadata(self) -> Mapping[TicketId, str]:
        ...


def check_new_ticket(ticket_id: TicketId, info: str, last_id: TicketId, exists: bool) -> None:
    """Reject a write that would leave a gap, overwrite a ticket or store empty info."""

    if not info:
        raise ValueError("Ticket info must not be empty")
    if exists:
        raise ValueError(f"Ticket {ticket_id} already exists")
    if not 1 <= ticket_id <= last_id:
        raise ValueError(f"Ticket id {ticket_id} was not allocated")


class InMemoryTicketLedger:
    """Dictionary backed ledger.

    Mutations made inside :meth:`transaction` are journaled and undone in reverse
    order if the block raises, so a failed operation leaves no trace.
    """

    def __init__(self) -> None:
        self._tickets: dict[TicketId, Ticket] = {}
        self._batch_metadata: dict[TicketId, str] = {}
        self._counter: TicketId = 0
        self._journal: list[Callable[[], None]] | None = None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._journal is not None:
            yield
            return
        self._journal = []
        try:
            yield
        except BaseException:
            for undo in reversed(self._journal):
                undo()
            raise
        finally:
            self._journal = None

    def _record(self, undo: Callable[[], None]) -> None:
        if self._journal is not None:
            self._journal.append(undo)

    def allocate_id(self) -> TicketId:
        previous = self._counter
        self._counter = previous + 1
        self._record(lambda: setattr(self, "_counter", previous))
        return self._counter

    def last_id(self) -> TicketId:
        return self._counter

    def put(self, ticket_id: TicketId, info: str, owner: str | None) -> Ticket:
        check_new_ticket(ticket_id, info, self._counter, ticket_id in self._tickets)
        ticket = Ticket(id=ticket_id, info=info, owner=owner)
        self._tickets[ticket_id] = ticket
        self._record(lambda: self._tickets.pop(ticket_id, None))
        return replace(ticket)

    def get(self, ticket_id: TicketId) -> Ticket | None:
        ticket = self._tickets.get(ticket_id)
        return replace(ticket) if ticket is not None else None

    def set_owner(self, ticket_id: TicketId, owner: str | None) -> None:
        ticket = self._tickets[ticket_id]
        previous = ticket.owner
        ticket.owner = owner
        self._record(lambda: setattr(ticket, "owner", previous))

    def set_cancelled(self, ticket_id: TicketId, cancelled: bool) -> None:
        ticket = self._tickets[ticket_id]
        previous_flag, previous_owner = ticket.cancelled, ticket.owner
        ticket.cancelled = cancelled
        if cancelled:
            ticket.owner = None

        def undo() -> None:
            ticket.cancelled = previous_flag
            ticket.owner = previous_owner

        self._record(undo)

    def exists_active(self, ticket_id: TicketId) -> bool:
        ticket = self._tickets.get(ticket_id)
        return ticket is not None and not ticket.cancelled

    def put_batch_metadata(self, ticket_id: TicketId, value: str) -> None:
        missing = ticket_id not in self._batch_metadata
        previous = self._batch_metadata.get(ticket_id)
        self._batch_metadata[ticket_id] = value

        def undo() -> None:
            if missing:
                self._batch_metadata.pop(ticket_id, None)
            else:
                self._batch_metadata[ticket_id] = previous  # type: ignore[assignment]

        self._record(undo)

    def get_batch_metadata(self, ticket_id: TicketId) -> str | None:
        return self._batch_metadata.get(ticket_id)

    def list_tickets(self) -> Sequence[Ticket]:
        return [replace(self._tickets[key]) for key in sorted(self._tickets)]

    def batch_metadata(self) -> Mapping[TicketId, str]:
        return dict(self._batch_metadata)
