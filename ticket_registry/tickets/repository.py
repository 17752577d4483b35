from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Mapping, Sequence

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlmodel import SQLModel

from ticket_registry.db.models import TICKET_COUNTER_NAME, BatchMetadataTable, CounterTable, TicketTable

from .ledger import check_new_ticket
from .models import Ticket, TicketId


class SqlTicketLedger:
    """Ticket ledger persisted through SQLAlchemy.

    A unit of work opened with :meth:`transaction` shares one session and commits
    on success or rolls back on error. Calls made outside of a unit of work run in
    their own short transaction.
    """

    def __init__(self, engine: Engine, *, session_factory: sessionmaker[Session] | None = None) -> None:
        self._engine = engine
        self._session_factory = session_factory or sessionmaker(engine, expire_on_commit=False)
        self._session: Session | None = None

    def ensure_schema(self) -> None:
        SQLModel.metadata.create_all(
            self._engine,
            tables=[TicketTable.__table__, BatchMetadataTable.__table__, CounterTable.__table__],
        )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._session is not None:
            yield
            return
        with self._session_factory.begin() as session:
            self._session = session
            try:
                yield
            finally:
                self._session = None

    @contextmanager
    def _scope(self) -> Iterator[Session]:
        if self._session is not None:
            yield self._session
            return
        with self._session_factory.begin() as session:
            yield session

    def allocate_id(self) -> TicketId:
        with self._scope() as session:
            counter = session.get(CounterTable, TICKET_COUNTER_NAME, with_for_update=True)
            if counter is None:
                counter = CounterTable(name=TICKET_COUNTER_NAME, value=0)
                session.add(counter)
            counter.value += 1
            session.flush()
            return counter.value

    def last_id(self) -> TicketId:
        with self._scope() as session:
            return self._last_id(session)

    @staticmethod
    def _last_id(session: Session) -> TicketId:
        counter = session.get(CounterTable, TICKET_COUNTER_NAME)
        return counter.value if counter is not None else 0

    def put(self, ticket_id: TicketId, info: str, owner: str | None) -> Ticket:
        with self._scope() as session:
            exists = session.get(TicketTable, ticket_id) is not None
            check_new_ticket(ticket_id, info, self._last_id(session), exists)
            row = TicketTable(id=ticket_id, info=info, owner=owner, cancelled=False)
            session.add(row)
            session.flush()
            return self._row_to_ticket(row)

    def get(self, ticket_id: TicketId) -> Ticket | None:
        with self._scope() as session:
            row = session.get(TicketTable, ticket_id)
            return self._row_to_ticket(row) if row is not None else None

    def set_owner(self, ticket_id: TicketId, owner: str | None) -> None:
        with self._scope() as session:
            row = self._require(session, ticket_id)
            row.owner = owner
            row.updated_at = datetime.now(timezone.utc)
            session.flush()

    def set_cancelled(self, ticket_id: TicketId, cancelled: bool) -> None:
        with self._scope() as session:
            row = self._require(session, ticket_id)
            row.cancelled = cancelled
            if cancelled:
                row.owner = None
            row.updated_at = datetime.now(timezone.utc)
            session.flush()

    def exists_active(self, ticket_id: TicketId) -> bool:
        ticket = self.get(ticket_id)
        return ticket is not None and not ticket.cancelled

    def put_batch_metadata(self, ticket_id: TicketId, value: str) -> None:
        with self._scope() as session:
            row = session.get(BatchMetadataTable, ticket_id)
            if row is None:
                session.add(BatchMetadataTable(ticket_id=ticket_id, value=value))
            else:
                row.value = value
            session.flush()

    def get_batch_metadata(self, ticket_id: TicketId) -> str | None:
        with self._scope() as session:
            row = session.get(BatchMetadataTable, ticket_id)
            return row.value if row is not None else None

    def list_tickets(self) -> Sequence[Ticket]:
        with self._scope() as session:
            rows = session.execute(select(TicketTable).order_by(TicketTable.id)).scalars().all()
            return [self._row_to_ticket(row) for row in rows]

    def batch_metadata(self) -> Mapping[TicketId, str]:
        with self._scope() as session:
            rows = session.execute(select(BatchMetadataTable)).scalars().all()
            return {row.ticket_id: row.value for row in rows}

    @staticmethod
    def _require(session: Session, ticket_id: TicketId) -> TicketTable:
        row = session.get(TicketTable, ticket_id)
        if row is None:
            raise KeyError(ticket_id)
        return row

    @staticmethod
    def _row_to_ticket(row: TicketTable) -> Ticket:
        return Ticket(id=row.id, info=row.info, owner=row.owner, cancelled=bool(row.cancelled))
