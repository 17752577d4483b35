from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import islice
from typing import Iterable

from .authority import AdminAuthority
from .errors import BatchTooLargeError, InvalidInfoError, NotAdminError
from .ledger import TicketLedger
from .models import BatchIssueResult, BatchPolicy, RejectedItem, TicketId
from .state import TicketAction, TicketStateMachine

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 50
MAX_INFO_BYTES = 128


def validate_info(info: object, *, max_bytes: int = MAX_INFO_BYTES, index: int | None = None) -> str:
    """Return ``info`` if it is a non-empty string of at most ``max_bytes`` UTF-8 bytes."""

    if not isinstance(info, str) or not info:
        raise InvalidInfoError("Ticket info must be a non-empty string", index=index)
    size = len(info.encode("utf-8"))
    if size > max_bytes:
        raise InvalidInfoError(f"Ticket info is {size} bytes, limit is {max_bytes}", index=index)
    return info


@dataclass(slots=True)
class IssuanceService:
    """Mint tickets singly or in batches on behalf of the administrator."""

    authority: AdminAuthority
    ledger: TicketLedger
    policy: BatchPolicy = BatchPolicy.ATOMIC
    max_batch_size: int = MAX_BATCH_SIZE
    max_info_bytes: int = MAX_INFO_BYTES

    def issue(self, caller: str, info: str) -> TicketId:
        self._require_admin(caller)
        validate_info(info, max_bytes=self.max_info_bytes)
        with self.ledger.transaction():
            return self._mint(caller, info)

    def batch_issue(self, caller: str, infos: Iterable[str], *, label: str | None = None) -> BatchIssueResult:
        """Issue one ticket per entry of ``infos``, in order.

        Under :attr:`BatchPolicy.ATOMIC` every entry is validated before any id is
        allocated and a single invalid entry fails the whole batch. Under
        :attr:`BatchPolicy.BEST_EFFORT` invalid entries are skipped and reported in
        :attr:`BatchIssueResult.rejected` while the remaining entries are issued.
        Each issued id receives a batch provenance entry: ``label`` when given,
        otherwise ``batch:<first id>:<position>/<count>``.
        """

        self._require_admin(caller)
        if isinstance(infos, (str, bytes)):
            raise InvalidInfoError("Batch entries must be a sequence of info strings, not a single string")
        entries = list(islice(infos, self.max_batch_size + 1))
        if len(entries) > self.max_batch_size:
            raise BatchTooLargeError(f"Batch exceeds the limit of {self.max_batch_size} entries")

        result = BatchIssueResult()
        accepted: list[str] = []
        for index, info in enumerate(entries):
            try:
                accepted.append(validate_info(info, max_bytes=self.max_info_bytes, index=index))
            except InvalidInfoError as exc:
                if self.policy == BatchPolicy.ATOMIC:
                    raise InvalidInfoError(f"Batch entry {index} rejected: {exc}", index=index) from exc
                result.rejected.append(RejectedItem(index=index, info=str(info), reason=str(exc)))

        with self.ledger.transaction():
            for info in accepted:
                result.ticket_ids.append(self._mint(caller, info))
            self._record_provenance(result.ticket_ids, label)

        if result.rejected:
            logger.warning(
                "Batch issued %d tickets and skipped %d entries", result.issued_count, len(result.rejected)
            )
        return result

    def _require_admin(self, caller: str) -> None:
        if not self.authority.is_admin(caller):
            raise NotAdminError(f"{caller!r} is not the registry administrator")

    def _mint(self, caller: str, info: str) -> TicketId:
        ticket_id = self.ledger.allocate_id()
        TicketStateMachine.next_status(TicketStateMachine.status_of(self.ledger.get(ticket_id)), TicketAction.ISSUE)
        self.ledger.put(ticket_id, info, caller)
        logger.debug("Minted ticket %d for %s", ticket_id, caller)
        return ticket_id

    def _record_provenance(self, ticket_ids: list[TicketId], label: str | None) -> None:
        if not ticket_ids:
            return
        first, count = ticket_ids[0], len(ticket_ids)
        for position, ticket_id in enumerate(ticket_ids, start=1):
            self.ledger.put_batch_metadata(ticket_id, label or f"batch:{first}:{position}/{count}")
