"""Ticket registry domain models and services."""

from .authority import AdminAuthority
from .cancellation import CancellationService
from .errors import (
    AlreadyCancelledError,
    BatchTooLargeError,
    CancelFailedError,
    InvalidInfoError,
    InvalidOwnerError,
    InvalidPriceError,
    NotAdminError,
    TicketNotFoundError,
    TicketRegistryError,
    UnauthorizedError,
)
from .issuance import IssuanceService, validate_info
from .ledger import InMemoryTicketLedger, TicketLedger
from .models import BatchIssueResult, BatchPolicy, RegistrySnapshot, RejectedItem, Ticket, TicketId, TicketRecord
from .pricing import PriceValidator
from .repository import SqlTicketLedger
from .service import TicketRegistry
from .state import TicketAction, TicketStateMachine, TicketStatus
from .transfer import TransferService

__all__ = [
    "AdminAuthority",
    "AlreadyCancelledError",
    "BatchIssueResult",
    "BatchPolicy",
    "BatchTooLargeError",
    "CancelFailedError",
    "CancellationService",
    "InMemoryTicketLedger",
    "InvalidInfoError",
    "InvalidOwnerError",
    "InvalidPriceError",
    "IssuanceService",
    "NotAdminError",
    "PriceValidator",
    "RegistrySnapshot",
    "RejectedItem",
    "SqlTicketLedger",
    "Ticket",
    "TicketAction",
    "TicketId",
    "TicketLedger",
    "TicketNotFoundError",
    "TicketRecord",
    "TicketRegistry",
    "TicketRegistryError",
    "TicketStateMachine",
    "TicketStatus",
    "TransferService",
    "UnauthorizedError",
    "validate_info",
]
