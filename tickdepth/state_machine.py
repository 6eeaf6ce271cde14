import logging
import math
import threading
from decimal import Decimal
from typing import Optional, Sequence, Tuple, Union

from tickdepth.buckets import orient_pool_ticks, tick_liquidity_buckets
from tickdepth.config import DEFAULT_CONFIG, EngineConfig
from tickdepth.equilibrium import find_equilibrium_price, resolve_edge_price_index
from tickdepth.extents import (
    clamp_zoom_extent,
    liquidity_data_extents,
    resolve_chart_window,
    user_range_extents,
    user_tick_extents,
    viewable_indexes,
    y_max_value,
    zoom_availability,
    zoom_extent,
)
from tickdepth.pricing import price_to_tick_index, significant_decimals, tick_index_to_price
from tickdepth.types import ChartState, PoolTick, PriceExtent, Tick

logger = logging.getLogger(__name__)

PriceInput = Union[Decimal, float, str]


class LiquidityStateMachine:
    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.config = config
        # feed threads update while the chart reads
        self.lock = threading.Lock()
        self.token_a_ticks: Tuple[Tick, ...] = ()
        self.token_b_ticks: Tuple[Tick, ...] = ()
        self.user_ticks: Tuple[Optional[Tick], ...] = ()
        self.container_width: float = 0
        self.initial_price: Optional[PriceInput] = None
        self.range: Optional[Tuple[PriceInput, PriceInput]] = None
        self.zoom: Optional[PriceExtent] = None

    def update_ticks(self, token_a_ticks: Sequence[Tick], token_b_ticks: Sequence[Tick]) -> None:
        with self.lock:
            self.token_a_ticks = tuple(token_a_ticks)
            self.token_b_ticks = tuple(token_b_ticks)
            logger.debug(
                "Tick snapshot updated: %d tokenA ticks, %d tokenB ticks",
                len(self.token_a_ticks),
                len(self.token_b_ticks),
            )

    def update_pool_ticks(
        self, token0_ticks: Sequence[PoolTick], token1_ticks: Sequence[PoolTick], forward: bool
    ) -> None:
        token_a_ticks, token_b_ticks = orient_pool_ticks(token0_ticks, token1_ticks, forward)
        self.update_ticks(token_a_ticks, token_b_ticks)

    def set_container_width(self, width: float) -> None:
        with self.lock:
            self.container_width = max(width, 0)

    def set_initial_price(self, price: Optional[PriceInput]) -> None:
        with self.lock:
            self.initial_price = price

    def set_range(self, min_price: PriceInput, max_price: PriceInput) -> None:
        with self.lock:
            self.range = (min_price, max_price)

    def set_user_ticks(self, ticks: Sequence[Optional[Tick]]) -> None:
        with self.lock:
            self.user_ticks = tuple(ticks)

    def set_zoom(self, min_index: float, max_index: float) -> None:
        with self.lock:
            self.zoom = clamp_zoom_extent(min_index, max_index, self.config)

    def clear_zoom(self) -> None:
        with self.lock:
            self.zoom = None

    def zoom_in(self) -> PriceExtent:
        return self._zoom("in")

    def zoom_out(self) -> PriceExtent:
        return self._zoom("out")

    def _zoom(self, direction: str) -> PriceExtent:
        with self.lock:
            window, range_extent, _, _ = self._resolve_window()
            if range_extent.is_complete:
                range_min, range_max = range_extent.min_index, range_extent.max_index
            else:
                range_min, range_max = window.graph_min_index, window.graph_max_index
            new_zoom = zoom_extent(direction, range_min, range_max, window, self.config)
            self.zoom = clamp_zoom_extent(new_zoom.min_index, new_zoom.max_index, self.config)
            if direction == "in" and self.range is not None:
                # the selected range shrinks with the view
                self.range = self._range_within(self.zoom)
            logger.debug("Zoomed %s to [%s, %s]", direction, self.zoom.min_index, self.zoom.max_index)
            return self.zoom

    def _range_within(self, zoom: PriceExtent) -> Tuple[Decimal, Decimal]:
        min_index = price_to_tick_index(self.range[0])
        max_index = price_to_tick_index(self.range[1])
        # an unreadable bound snaps to the zoom edge
        min_index = zoom.min_index if math.isnan(min_index) else max(min_index, zoom.min_index)
        max_index = zoom.max_index if math.isnan(max_index) else min(max_index, zoom.max_index)
        return (
            Decimal(str(tick_index_to_price(min_index))),
            Decimal(str(tick_index_to_price(max_index))),
        )

    def _resolve_window(self):
        edge_price_index = resolve_edge_price_index(
            self.token_a_ticks, self.token_b_ticks, self.initial_price
        )
        range_extent = (
            user_range_extents(self.range[0], self.range[1], edge_price_index, self.config)
            if self.range is not None
            else PriceExtent()
        )
        data_extent = liquidity_data_extents(self.token_a_ticks, self.token_b_ticks)
        window = resolve_chart_window(
            data_extent=data_extent,
            user_tick_extent=user_tick_extents(self.user_ticks),
            range_extent=range_extent,
            zoom=self.zoom,
            edge_price_index=edge_price_index,
            config=self.config,
        )
        return window, range_extent, data_extent, edge_price_index

    def chart_state(self) -> ChartState:
        with self.lock:
            window, range_extent, data_extent, edge_price_index = self._resolve_window()
            can_zoom_in, can_zoom_out = zoom_availability(
                self.zoom, range_extent, data_extent, window, self.config
            )
            viewable_min_index, viewable_max_index = viewable_indexes(
                window, self.container_width, self.config
            )
            buckets = tick_liquidity_buckets(
                self.token_a_ticks,
                self.token_b_ticks,
                self.container_width,
                self.config.bucket_width,
                viewable_min_index,
                viewable_max_index,
                edge_price_index,
            )
            buckets.sort(key=lambda bucket: bucket.lower_index_bound)
            equilibrium_price = find_equilibrium_price(self.token_a_ticks, self.token_b_ticks)

        # the finer of the window and the selected range decides display precision
        visible_spread = window.spread
        if range_extent.is_complete:
            visible_spread = min(visible_spread, range_extent.max_index - range_extent.min_index)

        logger.debug(
            "Chart state: window [%s, %s], %d buckets",
            window.graph_min_index,
            window.graph_max_index,
            len(buckets),
        )
        return ChartState(
            window=window,
            viewable_min_index=viewable_min_index,
            viewable_max_index=viewable_max_index,
            edge_price_index=edge_price_index,
            equilibrium_price=equilibrium_price,
            buckets=buckets,
            y_max_value=y_max_value(buckets),
            significant_decimals=significant_decimals(0, visible_spread),
            can_zoom_in=can_zoom_in,
            can_zoom_out=can_zoom_out,
        )
