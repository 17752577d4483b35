from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import TicketNotFoundError, UnauthorizedError
from .ledger import TicketLedger
from .models import TicketId
from .state import TicketAction, TicketStateMachine

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransferService:
    """Reassign ownership of active tickets.

    Transfers are accepted by the recipient: the caller must be ``to_owner`` and
    name the currently recorded owner as ``from_owner``.
    """

    ledger: TicketLedger

    def transfer(self, caller: str, ticket_id: TicketId, from_owner: str, to_owner: str) -> None:
        with self.ledger.transaction():
            ticket = self.ledger.get(ticket_id)
            if ticket is None:
                raise TicketNotFoundError(f"Ticket {ticket_id} not found")
            if to_owner != caller:
                raise UnauthorizedError("Only the recipient may accept a transfer")
            TicketStateMachine.next_status(TicketStateMachine.status_of(ticket), TicketAction.TRANSFER)
            if ticket.owner is None or ticket.owner != from_owner:
                raise UnauthorizedError(f"Ticket {ticket_id} is not owned by {from_owner!r}")

            self.ledger.set_owner(ticket_id, to_owner)
        logger.debug("Ticket %d moved from %s to %s", ticket_id, from_owner, to_owner)
