from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import RLock
from typing import Iterable, Iterator

from opentelemetry import trace
from opentelemetry.trace import TracerProvider

from ticket_registry.metrics import (
    OPERATION_DURATION_SECONDS,
    OPERATION_FAILURES_TOTAL,
    OPERATIONS_TOTAL,
    TICKETS_ISSUED_TOTAL,
    MetricsRegistry,
    track_duration,
)

from .authority import AdminAuthority
from .cancellation import CancellationService
from .errors import TicketRegistryError
from .issuance import MAX_BATCH_SIZE, MAX_INFO_BYTES, IssuanceService
from .ledger import TicketLedger
from .models import BatchIssueResult, BatchPolicy, RegistrySnapshot, Ticket, TicketId, TicketRecord
from .pricing import PriceValidator
from .state import TicketAction, TicketStateMachine, TicketStatus
from .transfer import TransferService

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "internal_error"


class TicketRegistry:
    """Entry point for every ticket operation.

    Each public call holds one registry-wide lock for its whole duration, so
    operations are observed one at a time, and each mutation runs inside a single
    ledger unit of work. Rejections raise a :class:`TicketRegistryError` subclass
    and leave the ledger untouched.
    """

    def __init__(
        self,
        authority: AdminAuthority,
        ledger: TicketLedger,
        *,
        batch_policy: BatchPolicy = BatchPolicy.ATOMIC,
        max_batch_size: int = MAX_BATCH_SIZE,
        max_info_bytes: int = MAX_INFO_BYTES,
        price_validator: PriceValidator | None = None,
        metrics: MetricsRegistry | None = None,
        tracer_provider: TracerProvider | None = None,
    ) -> None:
        self.authority = authority
        self.ledger = ledger
        self.issuance = IssuanceService(
            authority,
            ledger,
            policy=batch_policy,
            max_batch_size=max_batch_size,
            max_info_bytes=max_info_bytes,
        )
        self.transfers = TransferService(ledger)
        self.cancellations = CancellationService(authority, ledger)
        self.pricing = price_validator or PriceValidator()
        self.metrics = (metrics or MetricsRegistry()).register_defaults()
        self._tracer = trace.get_tracer(__name__, tracer_provider=tracer_provider)
        self._lock = RLock()

    @contextmanager
    def _operation(self, name: str, caller: str | None) -> Iterator[None]:
        with self._lock, self._tracer.start_as_current_span(f"ticket_registry.{name}") as span:
            if caller is not None:
                span.set_attribute("registry.caller", caller)
            duration = self.metrics.distribution(OPERATION_DURATION_SECONDS)
            try:
                with track_duration(duration, labels={"operation": name}):
                    yield
            except TicketRegistryError as exc:
                span.set_attribute("registry.error_code", exc.code)
                self.metrics.counter(OPERATION_FAILURES_TOTAL).inc(labels={"operation": name, "code": exc.code})
                logger.warning("%s rejected for %s: %s [%s]", name, caller, exc, exc.code)
                raise
            except Exception:
                span.set_attribute("registry.error_code", INTERNAL_ERROR_CODE)
                self.metrics.counter(OPERATION_FAILURES_TOTAL).inc(
                    labels={"operation": name, "code": INTERNAL_ERROR_CODE}
                )
                logger.exception("%s failed for %s", name, caller)
                raise
            self.metrics.counter(OPERATIONS_TOTAL).inc(labels={"operation": name})

    # Mutations

    def issue(self, caller: str, info: str) -> TicketId:
        with self._operation("issue", caller):
            ticket_id = self.issuance.issue(caller, info)
            self.metrics.counter(TICKETS_ISSUED_TOTAL).inc()
        logger.info("Issued ticket %d to %s", ticket_id, caller)
        return ticket_id

    def batch_issue(self, caller: str, infos: Iterable[str], *, label: str | None = None) -> BatchIssueResult:
        with self._operation("batch_issue", caller):
            result = self.issuance.batch_issue(caller, infos, label=label)
            self.metrics.counter(TICKETS_ISSUED_TOTAL).inc(result.issued_count)
        logger.info("Batch issued tickets %s to %s", result.ticket_ids, caller)
        return result

    def transfer(self, caller: str, ticket_id: TicketId, from_owner: str, to_owner: str) -> None:
        with self._operation("transfer", caller):
            self.transfers.transfer(caller, ticket_id, from_owner, to_owner)
        logger.info("Transferred ticket %d from %s to %s", ticket_id, from_owner, to_owner)

    def cancel(self, caller: str, ticket_id: TicketId) -> None:
        with self._operation("cancel", caller):
            self.cancellations.cancel(caller, ticket_id)
        logger.info("Cancelled ticket %d", ticket_id)

    def restore(self, caller: str, ticket_id: TicketId, *, owner: str | None = None) -> None:
        with self._operation("restore", caller):
            self.cancellations.restore(caller, ticket_id, owner=owner)
        logger.info("Restored ticket %d", ticket_id)

    def validate_price(self, amount: int) -> None:
        with self._operation("validate_price", None):
            self.pricing.validate(amount)

    # Reads

    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        with self._lock:
            return self.ledger.get(ticket_id)

    def get_info(self, ticket_id: TicketId) -> str | None:
        ticket = self.get_ticket(ticket_id)
        return ticket.info if ticket is not None else None

    def get_owner(self, ticket_id: TicketId) -> str | None:
        ticket = self.get_ticket(ticket_id)
        return ticket.owner if ticket is not None else None

    def is_cancelled(self, ticket_id: TicketId) -> bool:
        ticket = self.get_ticket(ticket_id)
        return ticket is not None and ticket.cancelled

    def status(self, ticket_id: TicketId) -> TicketStatus:
        return TicketStateMachine.status_of(self.get_ticket(ticket_id))

    def exists(self, ticket_id: TicketId) -> bool:
        return self.get_ticket(ticket_id) is not None

    def is_active(self, ticket_id: TicketId) -> bool:
        with self._lock:
            return self.ledger.exists_active(ticket_id)

    def is_transferable(self, ticket_id: TicketId) -> bool:
        ticket = self.get_ticket(ticket_id)
        if ticket is None or ticket.owner is None:
            return False
        return TicketStateMachine.can_apply(TicketStateMachine.status_of(ticket), TicketAction.TRANSFER)

    def last_ticket_id(self) -> TicketId:
        with self._lock:
            return self.ledger.last_id()

    def get_batch_metadata(self, ticket_id: TicketId) -> str | None:
        with self._lock:
            return self.ledger.get_batch_metadata(ticket_id)

    @property
    def admin(self) -> str:
        return self.authority.admin

    def is_admin(self, identity: str | None) -> bool:
        return self.authority.is_admin(identity)

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return RegistrySnapshot(
                admin=self.authority.admin,
                last_ticket_id=self.ledger.last_id(),
                tickets=[
                    TicketRecord(id=ticket.id, info=ticket.info, owner=ticket.owner, cancelled=ticket.cancelled)
                    for ticket in self.ledger.list_tickets()
                ],
                batch_metadata=dict(self.ledger.batch_metadata()),
            )
