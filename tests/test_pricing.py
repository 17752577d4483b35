import pytest

from ticket_registry.tickets import InvalidPriceError, PriceValidator


@pytest.mark.parametrize("amount", [10, 11, 10_000])
def test_prices_at_or_above_floor_are_accepted(amount):
    validator = PriceValidator()

    assert validator.is_valid(amount)
    validator.validate(amount)


@pytest.mark.parametrize("amount", [9, 0, -5])
def test_prices_below_floor_are_rejected(amount):
    with pytest.raises(InvalidPriceError) as exc:
        PriceValidator().validate(amount)

    assert exc.value.code == "invalid_price"


def test_floor_is_configurable():
    validator = PriceValidator(min_price=25)

    assert not validator.is_valid(24)
    assert validator.is_valid(25)
