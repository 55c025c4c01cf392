from decimal import Decimal

import pytest

from pastelaria.core.money import DIVERGENCE_TOLERANCE, Money, money_sum, to_decimal
from pastelaria.errors import ValidationError


def test_of_rounds_half_away_from_zero():
    assert Money.of("10.005").amount == Decimal("10.01")
    assert Money.of("-10.005").amount == Decimal("-10.01")
    assert Money.of("10.004").amount == Decimal("10.00")


def test_float_input_uses_its_decimal_text():
    assert Money.of(0.1) + Money.of(0.2) == Money.of("0.30")
    assert Money.of(2.675).amount == Decimal("2.68")


def test_repeated_addition_does_not_drift():
    total = money_sum([Money.of("0.10")] * 1000)
    assert total.amount == Decimal("100.00")


def test_arithmetic_with_plain_numbers():
    m = Money.of("10.00")
    assert (m + 5).amount == Decimal("15.00")
    assert (m - "2.50").amount == Decimal("7.50")
    assert (20 - m).amount == Decimal("10.00")
    assert (m * 3).amount == Decimal("30.00")
    assert (-m).amount == Decimal("-10.00")
    assert abs(Money.of("-3.20")) == Money.of("3.20")


def test_multiplication_rounds_to_cents():
    assert (Money.of("0.05") * Decimal("0.5")).amount == Decimal("0.03")


def test_none_is_zero():
    assert Money.of(None) == Money.zero()
    assert not Money.zero()


@pytest.mark.parametrize("bad", ["abc", "", "NaN", "Infinity", True])
def test_invalid_values_are_rejected(bad):
    with pytest.raises(ValidationError):
        to_decimal(bad)


def test_tolerance_is_strictly_greater_than_one_real():
    assert not Money.of("1.00").exceeds(DIVERGENCE_TOLERANCE)
    assert not Money.of("-1.00").exceeds(DIVERGENCE_TOLERANCE)
    assert Money.of("1.01").exceeds(DIVERGENCE_TOLERANCE)
    assert Money.of("-1.01").exceeds(DIVERGENCE_TOLERANCE)


def test_str_shows_currency():
    assert str(Money.of("12.5")) == "R$ 12.50"


@pytest.mark.parametrize("huge", ["1e30", "100000000.00", "-100000000.00", Decimal("1E+40")])
def test_amounts_beyond_column_range_are_rejected(huge):
    with pytest.raises(ValidationError):
        Money.of(huge)


def test_largest_column_value_is_accepted():
    assert Money.of("99999999.99").amount == Decimal("99999999.99")
