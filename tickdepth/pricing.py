import math
from decimal import Decimal
from typing import Literal, Optional, Union

TICK_BASE = 1.0001
_LOG_TICK_BASE = math.log(TICK_BASE)

Rounding = Optional[Literal["round", "ceil", "floor"]]


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def tick_index_to_price(tick_index: Union[int, float]) -> float:
    return math.pow(TICK_BASE, tick_index)


def price_to_tick_index(
    price: Union[Decimal, float, int, str], rounding: Rounding = None
) -> Union[float, int]:
    # non-positive or non-numeric prices have no index and give nan
    try:
        numeric_price = float(price)
    except (TypeError, ValueError):
        return math.nan
    if math.isnan(numeric_price) or numeric_price <= 0:
        return math.nan
    index = math.log(numeric_price) / _LOG_TICK_BASE
    if rounding is None or math.isinf(index):
        return index
    if rounding == "round":
        return round_half_up(index)
    if rounding == "ceil":
        return math.ceil(index)
    if rounding == "floor":
        return math.floor(index)
    raise ValueError(f"Unknown rounding mode: {rounding}")


def price_spread_to_index_spread(multiple: float) -> float:
    # index distance between a price and `multiple` times that price
    return math.log(multiple) / _LOG_TICK_BASE


def round_to_significant_digits(value: float, digits: int = 6) -> float:
    if value == 0 or not math.isfinite(value):
        return value
    magnitude = math.floor(math.log10(abs(value)))
    return round(value, digits - 1 - magnitude)


def significant_decimals(min_index: float, max_index: float) -> int:
    diff = max_index - min_index
    if diff <= 25:
        return 6
    if diff <= 250:
        return 5
    if diff <= 2500:
        return 4
    return 3
