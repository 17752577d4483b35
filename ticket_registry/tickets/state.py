from __future__ import annotations

from enum import Enum

from .errors import AlreadyCancelledError, CancelFailedError, TicketNotFoundError, TicketRegistryError
from .models import Ticket


class TicketStatus(str, Enum):
    """Lifecycle states of a ticket."""

    NONEXISTENT = "nonexistent"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class TicketAction(str, Enum):
    ISSUE = "issue"
    TRANSFER = "transfer"
    CANCEL = "cancel"
    RESTORE = "restore"


class TicketStateMachine:
    """Validate ticket lifecycle transitions."""

    _TRANSITIONS: dict[tuple[TicketStatus, TicketAction], TicketStatus] = {
        (TicketStatus.NONEXISTENT, TicketAction.ISSUE): TicketStatus.ACTIVE,
        (TicketStatus.ACTIVE, TicketAction.TRANSFER): TicketStatus.ACTIVE,
        (TicketStatus.ACTIVE, TicketAction.CANCEL): TicketStatus.CANCELLED,
        (TicketStatus.CANCELLED, TicketAction.RESTORE): TicketStatus.ACTIVE,
    }

    @classmethod
    def status_of(cls, ticket: Ticket | None) -> TicketStatus:
        if ticket is None:
            return TicketStatus.NONEXISTENT
        return TicketStatus.CANCELLED if ticket.cancelled else TicketStatus.ACTIVE

    @classmethod
    def can_apply(cls, current: TicketStatus, action: TicketAction) -> bool:
        return (current, action) in cls._TRANSITIONS

    @classmethod
    def next_status(cls, current: TicketStatus, action: TicketAction) -> TicketStatus:
        """Return the status reached by ``action`` or raise the matching registry error."""

        try:
            return cls._TRANSITIONS[(current, action)]
        except KeyError:
            raise cls._rejection(current, action) from None

    @staticmethod
    def _rejection(current: TicketStatus, action: TicketAction) -> TicketRegistryError:
        # a ticket that was never issued is also "not cancelled"
        if action == TicketAction.RESTORE:
            return CancelFailedError("Ticket is not cancelled")
        if current == TicketStatus.NONEXISTENT:
            return TicketNotFoundError(f"Cannot {action.value} a ticket that was never issued")
        if current == TicketStatus.CANCELLED:
            return AlreadyCancelledError("Ticket is already cancelled")
        return TicketRegistryError(f"Invalid ticket transition: {current.value} --{action.value}-->")
