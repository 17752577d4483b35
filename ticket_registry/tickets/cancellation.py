from __future__ import annotations

import logging
from dataclasses import dataclass

from .authority import AdminAuthority
from .errors import InvalidOwnerError, NotAdminError, TicketNotFoundError, UnauthorizedError
from .ledger import TicketLedger
from .models import TicketId
from .state import TicketAction, TicketStateMachine

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CancellationService:
    """Cancel tickets on behalf of their owners and restore them for the administrator."""

    authority: AdminAuthority
    ledger: TicketLedger

    def cancel(self, caller: str, ticket_id: TicketId) -> None:
        with self.ledger.transaction():
            ticket = self.ledger.get(ticket_id)
            if ticket is None:
                raise TicketNotFoundError(f"Ticket {ticket_id} not found")
            # checked before the owner lookup: cancelling already cleared the owner
            TicketStateMachine.next_status(TicketStateMachine.status_of(ticket), TicketAction.CANCEL)
            if ticket.owner is None:
                raise TicketNotFoundError(f"Ticket {ticket_id} has no recorded owner")
            if ticket.owner != caller:
                raise UnauthorizedError(f"Ticket {ticket_id} is not owned by {caller!r}")

            self.ledger.set_cancelled(ticket_id, True)
        logger.debug("Ticket %d cancelled by %s", ticket_id, caller)

    def restore(self, caller: str, ticket_id: TicketId, *, owner: str | None = None) -> None:
        """Re-activate a cancelled ticket.

        Previous holders are not tracked, so the ticket comes back without an owner
        unless the administrator names one through ``owner``.
        """

        if not self.authority.is_admin(caller):
            raise NotAdminError(f"{caller!r} is not the registry administrator")

        with self.ledger.transaction():
            ticket = self.ledger.get(ticket_id)
            TicketStateMachine.next_status(TicketStateMachine.status_of(ticket), TicketAction.RESTORE)
            if owner is not None and not owner.strip():
                raise InvalidOwnerError(f"Ticket {ticket_id} cannot be restored to a blank owner")
            self.ledger.set_cancelled(ticket_id, False)
            if owner is not None:
                self.ledger.set_owner(ticket_id, owner)
        logger.debug("Ticket %d restored by %s (owner=%s)", ticket_id, caller, owner)
