from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

ZERO = Decimal(0)


class InvalidTickError(ValueError):
    pass


def _to_decimal(name: str, value) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # floats go through str so 0.1 stays 0.1
            result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise InvalidTickError(f"{name} is not a number: {value!r}") from exc
    if result.is_nan():
        raise InvalidTickError(f"{name} is NaN")
    return result


def _to_tick_index(name: str, value) -> int:
    if isinstance(value, bool):
        raise InvalidTickError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        as_decimal = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidTickError(f"{name} must be an integer, got {value!r}") from exc
    if not as_decimal.is_finite() or as_decimal != as_decimal.to_integral_value():
        raise InvalidTickError(f"{name} must be an integer, got {value!r}")
    return int(as_decimal)


def _check_non_negative(name: str, value: Decimal) -> None:
    if value < 0:
        raise InvalidTickError(f"{name} must not be negative, got {value}")


def _check_positive(name: str, value: Decimal) -> None:
    if not value > 0:
        raise InvalidTickError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class Tick:
    tick_index: int
    price: Decimal
    reserve_self: Decimal
    reserve_other: Decimal = ZERO
    fee: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "tick_index", _to_tick_index("tick_index", self.tick_index))
        for name in ("price", "reserve_self", "reserve_other", "fee"):
            object.__setattr__(self, name, _to_decimal(name, getattr(self, name)))
        _check_positive("price", self.price)
        _check_non_negative("reserve_self", self.reserve_self)
        _check_non_negative("reserve_other", self.reserve_other)
        _check_non_negative("fee", self.fee)

    @property
    def virtual_price(self) -> Decimal:
        return self.price * (1 + self.fee)


@dataclass(frozen=True)
class PoolTick:
    tick_index_1_to_0: int
    price_1_to_0: Decimal
    reserve0: Decimal
    reserve1: Decimal
    fee: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "tick_index_1_to_0", _to_tick_index("tick_index_1_to_0", self.tick_index_1_to_0)
        )
        for name in ("price_1_to_0", "reserve0", "reserve1", "fee"):
            object.__setattr__(self, name, _to_decimal(name, getattr(self, name)))
        _check_positive("price_1_to_0", self.price_1_to_0)
        _check_non_negative("reserve0", self.reserve0)
        _check_non_negative("reserve1", self.reserve1)
        _check_non_negative("fee", self.fee)


@dataclass(frozen=True)
class EquilibriumCandidate:
    virtual_price: Decimal
    reserve_low: Decimal
    reserve_high: Decimal

    @property
    def low_value(self) -> Decimal:
        return self.reserve_low * self.virtual_price

    @property
    def high_value(self) -> Decimal:
        return self.reserve_high * self.virtual_price


@dataclass(frozen=True)
class BucketBoundary:
    lower_index_bound: int
    upper_index_bound: int

    @property
    def width(self) -> int:
        return self.upper_index_bound - self.lower_index_bound


@dataclass(frozen=True)
class FilledBucket:
    lower_index_bound: int
    upper_index_bound: int
    reserve_value: Decimal

    @property
    def boundary(self) -> BucketBoundary:
        return BucketBoundary(self.lower_index_bound, self.upper_index_bound)


@dataclass
class MergedBucket:
    lower_index_bound: int
    upper_index_bound: int
    reserve_value_a: Decimal = ZERO
    reserve_value_b: Decimal = ZERO

    @property
    def boundary(self) -> BucketBoundary:
        return BucketBoundary(self.lower_index_bound, self.upper_index_bound)


@dataclass(frozen=True)
class PriceExtent:
    min_index: Optional[float] = None
    max_index: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.min_index is not None and self.max_index is not None


@dataclass(frozen=True)
class ChartWindow:
    graph_min_index: float
    graph_max_index: float

    def __post_init__(self) -> None:
        if not self.graph_min_index < self.graph_max_index:
            raise ValueError(
                f"Chart window must satisfy min < max, got "
                f"[{self.graph_min_index}, {self.graph_max_index}]"
            )

    @property
    def spread(self) -> float:
        return self.graph_max_index - self.graph_min_index


@dataclass
class ChartState:
    window: ChartWindow
    viewable_min_index: float
    viewable_max_index: float
    edge_price_index: Optional[float]
    equilibrium_price: Optional[Decimal]
    buckets: List[MergedBucket] = field(default_factory=list)
    y_max_value: Decimal = ZERO
    significant_decimals: int = 3
    can_zoom_in: bool = False
    can_zoom_out: bool = False
