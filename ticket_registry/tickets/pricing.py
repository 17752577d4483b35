from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidPriceError

MIN_PRICE = 10


@dataclass(slots=True, frozen=True)
class PriceValidator:
    """Standalone price floor check; not linked to issuance."""

    min_price: int = MIN_PRICE

    def is_valid(self, amount: int) -> bool:
        return amount >= self.min_price

    def validate(self, amount: int) -> None:
        if not self.is_valid(amount):
            raise InvalidPriceError(f"Price {amount} is below the minimum of {self.min_price}")
