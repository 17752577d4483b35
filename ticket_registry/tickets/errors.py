from __future__ import annotations


class TicketRegistryError(RuntimeError):
    """Base error for rejected registry operations."""

    code = "registry_error"


class NotAdminError(TicketRegistryError):
    """Raised when a privileged operation is invoked by a non-administrator."""

    code = "not_admin"


class UnauthorizedError(TicketRegistryError):
    """Raised when the caller is not the recorded owner or the transfer recipient."""

    code = "unauthorized"


class TicketNotFoundError(TicketRegistryError):
    """Raised when a ticket could not be located."""

    code = "not_found"


class InvalidInfoError(TicketRegistryError):
    """Raised when ticket info is empty or too long."""

    code = "invalid_info"

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class BatchTooLargeError(TicketRegistryError):
    code = "batch_too_large"


class AlreadyCancelledError(TicketRegistryError):
    code = "already_cancelled"


class CancelFailedError(TicketRegistryError):
    """Raised when restoring a ticket that is not cancelled."""

    code = "cancel_failed"


class InvalidPriceError(TicketRegistryError):
    code = "invalid_price"


class InvalidOwnerError(TicketRegistryError):
    """Raised when an owner identity handed to the registry is blank."""

    code = "invalid_owner"
