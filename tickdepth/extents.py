import math
from decimal import Decimal
from typing import Iterable, List, Literal, Optional, Sequence, Tuple, Union

from tickdepth.config import DEFAULT_CONFIG, EngineConfig
from tickdepth.pricing import (
    price_spread_to_index_spread,
    price_to_tick_index,
    round_half_up,
    round_to_significant_digits,
)
from tickdepth.types import ZERO, ChartWindow, MergedBucket, PriceExtent, Tick

PriceValue = Union[Decimal, float, int, str]

# default view of a pair without any price signal: 1/1.1 to 1.1
DEFAULT_MIN_INDEX = price_to_tick_index(1 / 1.1)
DEFAULT_MAX_INDEX = price_to_tick_index(1.1)

# an empty chart shows 1/4x to 4x of the current price
INITIAL_INDEX_SPREAD = price_spread_to_index_spread(4)
# a chart collapsed on one index shows 1/10x to 10x around it
DEGENERATE_INDEX_SPREAD = round_half_up(price_spread_to_index_spread(10))


def _is_known(value: Optional[float]) -> bool:
    return value is not None and not math.isnan(value)


def liquidity_data_extents(
    token_a_ticks: Sequence[Tick], token_b_ticks: Sequence[Tick]
) -> PriceExtent:
    indexes = [tick.tick_index for tick in token_a_ticks]
    indexes.extend(tick.tick_index for tick in token_b_ticks)
    if not indexes:
        return PriceExtent()
    return PriceExtent(min(indexes), max(indexes))


def user_tick_extents(user_ticks: Iterable[Optional[Tick]]) -> PriceExtent:
    indexes = [tick.tick_index for tick in user_ticks if tick is not None]
    if not indexes:
        return PriceExtent()
    return PriceExtent(min(indexes), max(indexes))


def get_range_indexes(
    edge_price_index: Optional[float],
    fractional_range_min_index: float,
    fractional_range_max_index: float,
) -> Tuple[float, float]:
    range_min_index = round_to_significant_digits(fractional_range_min_index)
    range_max_index = round_to_significant_digits(fractional_range_max_index)
    # align fractional positions to whole tick indexes
    if edge_price_index is None:
        return range_min_index - 0.5, range_max_index + 0.5
    index_now = round_half_up(edge_price_index)
    return (
        math.ceil(range_min_index) - (1 if range_min_index >= index_now else 0),
        math.floor(range_max_index) + (1 if range_max_index <= index_now else 0),
    )


def get_range_positions(
    edge_price_index: Optional[float],
    fractional_range_min_index: float,
    fractional_range_max_index: float,
) -> Tuple[float, float]:
    range_min_index, range_max_index = get_range_indexes(
        edge_price_index, fractional_range_min_index, fractional_range_max_index
    )
    if edge_price_index is None:
        return range_min_index, range_max_index
    # place the range flags around the selected ticks rather than on them
    index_now = round_half_up(edge_price_index)
    return (
        range_min_index - (1 if range_min_index <= index_now else 0),
        range_max_index + (1 if range_max_index >= index_now else 0),
    )


def _clamped_range_index(price: PriceValue, fallback: float, config: EngineConfig) -> float:
    index = price_to_tick_index(price)
    if math.isnan(index):
        return fallback
    return max(config.price_min_index, min(config.price_max_index, index))


def user_range_extents(
    range_min_price: PriceValue,
    range_max_price: PriceValue,
    edge_price_index: Optional[float] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> PriceExtent:
    fractional_min = _clamped_range_index(range_min_price, DEFAULT_MIN_INDEX, config)
    fractional_max = _clamped_range_index(range_max_price, DEFAULT_MAX_INDEX, config)
    range_min_index, range_max_index = get_range_positions(
        edge_price_index, fractional_min, fractional_max
    )
    return PriceExtent(range_min_index, range_max_index)


def clamp_zoom_extent(
    zoom_min_index: float, zoom_max_index: float, config: EngineConfig = DEFAULT_CONFIG
) -> PriceExtent:
    return PriceExtent(
        max(zoom_min_index, config.zoom_min_index_limit),
        min(zoom_max_index, config.zoom_max_index_limit),
    )


def zoom_extent(
    direction: Literal["in", "out"],
    range_min_index: float,
    range_max_index: float,
    window: ChartWindow,
    config: EngineConfig = DEFAULT_CONFIG,
) -> PriceExtent:
    graph_min_index, graph_max_index = window.graph_min_index, window.graph_max_index
    if not all(
        math.isfinite(value)
        for value in (range_min_index, range_max_index, graph_min_index, graph_max_index)
    ):
        return PriceExtent(graph_min_index, graph_max_index)
    if direction not in ("in", "out"):
        raise ValueError(f"Zoom direction must be 'in' or 'out', got {direction!r}")

    midpoint_index = (range_min_index + range_max_index) / 2
    if direction == "in":
        index_spread = (graph_max_index - graph_min_index) / config.zoom_speed_factor
    else:
        index_spread = (graph_max_index - graph_min_index) * config.zoom_speed_factor
    index_spread = max(config.min_zoom_index_spread, index_spread)

    new_min_index = round_half_up(midpoint_index - index_spread / 2)
    new_max_index = round_half_up(midpoint_index + index_spread / 2)
    # keep the new view from drifting past the edges of the current one
    offset = max(graph_min_index - new_min_index, 0) + min(graph_max_index - new_max_index, 0)
    return PriceExtent(new_min_index + offset, new_max_index + offset)


def zoom_availability(
    zoom: Optional[PriceExtent],
    range_extent: PriceExtent,
    data_extent: PriceExtent,
    window: ChartWindow,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Tuple[bool, bool]:
    # without a zoom the window already holds all data and the range
    shown_min, shown_max = window.graph_min_index, window.graph_max_index
    if zoom is not None and _is_known(zoom.min_index) and _is_known(zoom.max_index):
        shown_min, shown_max = zoom.min_index, zoom.max_index
        if _is_known(range_extent.min_index) and _is_known(range_extent.max_index):
            shown_min = min(range_extent.min_index, shown_min)
            shown_max = max(range_extent.max_index, shown_max)

    # +2 leaves room for rounding on both sides
    can_zoom_in = shown_max - shown_min > config.min_zoom_index_spread + 2
    data_min = config.zoom_min_index_limit
    data_max = config.zoom_max_index_limit
    if _is_known(data_extent.min_index) and _is_known(data_extent.max_index):
        data_min, data_max = data_extent.min_index, data_extent.max_index
    can_zoom_out = not (data_min >= shown_min and data_max <= shown_max)
    return can_zoom_in, can_zoom_out


def resolve_chart_window(
    data_extent: Optional[PriceExtent] = None,
    user_tick_extent: Optional[PriceExtent] = None,
    range_extent: Optional[PriceExtent] = None,
    zoom: Optional[PriceExtent] = None,
    edge_price_index: Optional[float] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> ChartWindow:
    data_extent = data_extent or PriceExtent()
    user_tick_extent = user_tick_extent or PriceExtent()
    range_extent = range_extent or PriceExtent()

    zoomed_min, zoomed_max = data_extent.min_index, data_extent.max_index
    if zoom is not None and _is_known(zoom.min_index) and _is_known(zoom.max_index):
        zoom = clamp_zoom_extent(zoom.min_index, zoom.max_index, config)
        if _is_known(data_extent.min_index) and _is_known(data_extent.max_index):
            zoomed_min = max(data_extent.min_index, zoom.min_index)
            zoomed_max = min(data_extent.max_index, zoom.max_index)
        else:
            zoomed_min, zoomed_max = zoom.min_index, zoom.max_index

    all_values: List[float] = [
        value
        for value in (
            user_tick_extent.min_index,
            user_tick_extent.max_index,
            range_extent.min_index,
            range_extent.max_index,
            zoomed_min,
            zoomed_max,
        )
        if _is_known(value)
    ]
    if all_values:
        graph_min_index, graph_max_index = min(all_values), max(all_values)
    elif edge_price_index is not None and not math.isnan(edge_price_index):
        graph_min_index = edge_price_index - INITIAL_INDEX_SPREAD
        graph_max_index = edge_price_index + INITIAL_INDEX_SPREAD
    else:
        graph_min_index, graph_max_index = DEFAULT_MIN_INDEX, DEFAULT_MAX_INDEX

    if graph_min_index == graph_max_index:
        graph_min_index -= DEGENERATE_INDEX_SPREAD
        graph_max_index += DEGENERATE_INDEX_SPREAD
    return ChartWindow(graph_min_index, graph_max_index)


def viewable_indexes(
    window: ChartWindow, container_width: float, config: EngineConfig = DEFAULT_CONFIG
) -> Tuple[float, float]:
    spread = window.spread
    width = max(1, container_width - config.left_padding - config.right_padding)
    return (
        window.graph_min_index - spread * config.left_padding / width,
        window.graph_max_index + spread * config.right_padding / width,
    )


def y_max_value(buckets: Iterable[MergedBucket]) -> Decimal:
    result = ZERO
    for bucket in buckets:
        result = max(result, bucket.reserve_value_a, bucket.reserve_value_b)
    return result
