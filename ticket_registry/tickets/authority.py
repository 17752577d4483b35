from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class AdminAuthority:
    """The single administrator identity, fixed when the registry is built."""

    admin: str

    def __post_init__(self) -> None:
        if not self.admin or not self.admin.strip():
            raise ValueError("Administrator identity must not be empty")

    def is_admin(self, identity: str | None) -> bool:
        return identity == self.admin
