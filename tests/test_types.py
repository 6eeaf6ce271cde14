from decimal import Decimal

import pytest

from tickdepth.types import ChartWindow, InvalidTickError, MergedBucket, PoolTick, PriceExtent, Tick


def test_tick_coerces_numbers_to_decimal():
    tick = Tick(tick_index=1, price="2", reserve_self=3, reserve_other=0.1)
    assert tick.price == Decimal("2")
    assert tick.reserve_self == Decimal(3)
    assert tick.reserve_other == Decimal("0.1")
    assert tick.fee == Decimal(0)


def test_tick_virtual_price_includes_fee():
    tick = Tick(tick_index=0, price="2", reserve_self=1, fee="0.01")
    assert tick.virtual_price == Decimal("2.02")


def test_tick_accepts_integral_float_index():
    assert Tick(tick_index=2.0, price=1, reserve_self=1).tick_index == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {"reserve_self": -1},
        {"reserve_other": Decimal("-0.01")},
        {"reserve_self": Decimal("NaN")},
        {"reserve_self": "lots"},
        {"fee": -1},
        {"price": 0},
        {"price": -3},
        {"tick_index": 1.5},
        {"tick_index": True},
    ],
)
def test_tick_rejects_invalid_shape(kwargs):
    values = {"tick_index": 0, "price": 1, "reserve_self": 1}
    values.update(kwargs)
    with pytest.raises(InvalidTickError):
        Tick(**values)


def test_invalid_tick_error_is_value_error():
    with pytest.raises(ValueError):
        Tick(tick_index=0, price=1, reserve_self=-5)


def test_pool_tick_validates_reserves():
    with pytest.raises(InvalidTickError):
        PoolTick(tick_index_1_to_0=0, price_1_to_0=1, reserve0=-1, reserve1=0)


def test_chart_window_requires_positive_span():
    assert ChartWindow(0, 10).spread == 10
    with pytest.raises(ValueError):
        ChartWindow(5, 5)
    with pytest.raises(ValueError):
        ChartWindow(6, 5)


def test_merged_bucket_defaults_to_zero_reserves():
    bucket = MergedBucket(0, 10)
    assert bucket.reserve_value_a == 0
    assert bucket.reserve_value_b == 0
    assert bucket.boundary.width == 10


def test_price_extent_completeness():
    assert PriceExtent(0, 1).is_complete
    assert not PriceExtent(0, None).is_complete
    assert not PriceExtent().is_complete
