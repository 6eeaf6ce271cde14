import math
from decimal import Decimal

import pytest

from tickdepth.pricing import (
    price_to_tick_index,
    round_half_up,
    round_to_significant_digits,
    significant_decimals,
    tick_index_to_price,
)


def test_tick_index_round_trip_over_wide_range():
    indexes = list(range(-500_000, 500_001, 9_973)) + [-500_000, -1, 0, 1, 500_000]
    for index in indexes:
        assert price_to_tick_index(tick_index_to_price(index)) == pytest.approx(index, abs=1e-6)


def test_tick_index_zero_is_price_one():
    assert tick_index_to_price(0) == 1.0
    assert price_to_tick_index(1) == 0.0


def test_price_to_tick_index_accepts_decimal_and_string():
    expected = math.log(2) / math.log(1.0001)
    assert price_to_tick_index(Decimal("2")) == pytest.approx(expected)
    assert price_to_tick_index("2") == pytest.approx(expected)


@pytest.mark.parametrize("price", [0, -1, Decimal("-0.5"), "abc", None, math.nan, Decimal("NaN")])
def test_price_to_tick_index_is_unavailable_for_invalid_prices(price):
    assert math.isnan(price_to_tick_index(price))
    assert math.isnan(price_to_tick_index(price, rounding="round"))


def test_price_to_tick_index_rounding_modes():
    price = tick_index_to_price(10.4)
    assert price_to_tick_index(price, rounding="round") == 10
    assert price_to_tick_index(price, rounding="ceil") == 11
    assert price_to_tick_index(price, rounding="floor") == 10
    assert isinstance(price_to_tick_index(price, rounding="round"), int)


def test_price_to_tick_index_rejects_unknown_rounding():
    with pytest.raises(ValueError):
        price_to_tick_index(2, rounding="truncate")


def test_round_half_up_matches_ui_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(-2.6) == -3
    assert round_half_up(0.49) == 0


def test_round_to_significant_digits():
    assert round_to_significant_digits(4054.651081081) == pytest.approx(4054.65)
    assert round_to_significant_digits(99.99999999) == pytest.approx(100.0)
    assert round_to_significant_digits(0) == 0
    assert round_to_significant_digits(123456789, 3) == pytest.approx(123000000)


def test_significant_decimals_thresholds():
    assert significant_decimals(0, 25) == 6
    assert significant_decimals(0, 26) == 5
    assert significant_decimals(100, 350) == 5
    assert significant_decimals(0, 2500) == 4
    assert significant_decimals(0, 2501) == 3
