import math
from bisect import bisect_left, bisect_right
from decimal import Decimal
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple

from tickdepth.pricing import round_half_up, tick_index_to_price
from tickdepth.types import ZERO, BucketBoundary, FilledBucket, MergedBucket, PoolTick, Tick

MatchSide = Literal["upper", "lower"]


def build_empty_buckets(
    container_width: float,
    bucket_width: float,
    graph_min_index: float,
    graph_max_index: float,
    edge_price_index: float,
) -> Tuple[List[BucketBoundary], List[BucketBoundary]]:
    # the current price is the break point between the two bucket sections
    index_now = round_half_up(edge_price_index)
    index_min = math.floor(graph_min_index)
    index_max = math.ceil(graph_max_index)
    current_price_is_within_view = index_min <= index_now <= index_max

    if bucket_width <= 0:
        bucket_width = 1
    # one extra bucket so the bucket containing the current price can be split
    bucket_count = max(math.ceil(container_width / bucket_width), 1) + (
        1 if current_price_is_within_view else 0
    )

    token_a_index_count = min(index_now, index_max) - index_min + 1 if index_now >= index_min else 0
    token_b_index_count = index_max - max(index_now, index_min) + 1 if index_now <= index_max else 0
    index_total_count = token_a_index_count + token_b_index_count
    if index_total_count <= 0:
        return [], [BucketBoundary(index_min, index_min + 1)]

    indexes_per_bucket = math.ceil(index_total_count / bucket_count)
    token_a_bucket_count = math.ceil(token_a_index_count / indexes_per_bucket)
    token_b_bucket_count = math.ceil(token_b_index_count / indexes_per_bucket)

    token_a_buckets: List[BucketBoundary] = []
    upper = min(index_max, index_now)
    for _ in range(token_a_bucket_count):
        token_a_buckets.append(BucketBoundary(upper - indexes_per_bucket, upper))
        upper -= indexes_per_bucket
    token_a_buckets.reverse()

    token_b_buckets: List[BucketBoundary] = []
    lower = max(index_min, index_now)
    for _ in range(token_b_bucket_count):
        token_b_buckets.append(BucketBoundary(lower, lower + indexes_per_bucket))
        lower += indexes_per_bucket

    return token_a_buckets, token_b_buckets


def _find_bucket(
    boundaries: Sequence[BucketBoundary],
    lower_bounds: Sequence[int],
    tick_index: int,
    lower_inclusive: bool,
) -> Optional[int]:
    if lower_inclusive:
        # [lower, upper)
        position = bisect_right(lower_bounds, tick_index) - 1
        if position >= 0 and tick_index < boundaries[position].upper_index_bound:
            return position
    else:
        # (lower, upper]
        position = bisect_left(lower_bounds, tick_index) - 1
        if position >= 0 and tick_index <= boundaries[position].upper_index_bound:
            return position
    return None


def fill_buckets(
    boundaries: Sequence[BucketBoundary],
    ticks: Sequence[Tick],
    match_side: MatchSide,
    edge_price_index: float,
    reserve_value: Callable[[Decimal], Decimal] = lambda reserve: reserve,
) -> List[FilledBucket]:
    if match_side not in ("upper", "lower"):
        raise ValueError(f"match_side must be 'upper' or 'lower', got {match_side!r}")

    ordered = sorted(boundaries, key=lambda boundary: boundary.lower_index_bound)
    lower_bounds = [boundary.lower_index_bound for boundary in ordered]
    sums: List[Decimal] = [ZERO] * len(ordered)

    for tick in ticks:
        if tick.reserve_self.is_zero():
            continue
        # "lower" matches a tick on the price as if above it, "upper" as if below
        if tick.tick_index == edge_price_index:
            lower_inclusive = match_side == "lower"
        else:
            lower_inclusive = tick.tick_index > edge_price_index
        position = _find_bucket(ordered, lower_bounds, tick.tick_index, lower_inclusive)
        if position is not None:
            sums[position] += tick.reserve_self

    return [
        FilledBucket(boundary.lower_index_bound, boundary.upper_index_bound, reserve_value(total))
        for boundary, total in zip(ordered, sums)
        if total > 0
    ]


def merge_buckets(
    token_a_buckets: Sequence[FilledBucket], token_b_buckets: Sequence[FilledBucket]
) -> List[MergedBucket]:
    # output order is not guaranteed
    merged: Dict[BucketBoundary, MergedBucket] = {}
    for bucket in token_a_buckets:
        existing = merged.get(bucket.boundary)
        if existing is None:
            merged[bucket.boundary] = MergedBucket(
                bucket.lower_index_bound, bucket.upper_index_bound, reserve_value_a=bucket.reserve_value
            )
        else:
            existing.reserve_value_a += bucket.reserve_value
    for bucket in token_b_buckets:
        existing = merged.get(bucket.boundary)
        if existing is None:
            merged[bucket.boundary] = MergedBucket(
                bucket.lower_index_bound, bucket.upper_index_bound, reserve_value_b=bucket.reserve_value
            )
        else:
            existing.reserve_value_b += bucket.reserve_value
    return list(merged.values())


def tick_liquidity_buckets(
    token_a_ticks: Sequence[Tick],
    token_b_ticks: Sequence[Tick],
    container_width: float,
    bucket_width: float,
    viewable_min_index: float,
    viewable_max_index: float,
    edge_price_index: Optional[float],
) -> List[MergedBucket]:
    if edge_price_index is None or len(token_a_ticks) + len(token_b_ticks) == 0:
        return []

    token_a_bounds, token_b_bounds = build_empty_buckets(
        container_width, bucket_width, viewable_min_index, viewable_max_index, edge_price_index
    )
    boundaries = token_a_bounds + token_b_bounds
    # express tokenB reserves in tokenA units so both bars share one scale
    edge_price = Decimal(str(tick_index_to_price(edge_price_index)))

    return merge_buckets(
        fill_buckets(boundaries, token_a_ticks, "upper", edge_price_index),
        fill_buckets(
            boundaries,
            token_b_ticks,
            "lower",
            edge_price_index,
            lambda reserve: reserve * edge_price,
        ),
    )


def orient_pool_ticks(
    token0_ticks: Sequence[PoolTick], token1_ticks: Sequence[PoolTick], forward: bool
) -> Tuple[List[Tick], List[Tick]]:
    def _to_tick(pool_tick: PoolTick, is_token1: bool) -> Tick:
        self_reserve, other_reserve = (
            (pool_tick.reserve1, pool_tick.reserve0)
            if is_token1
            else (pool_tick.reserve0, pool_tick.reserve1)
        )
        return Tick(
            tick_index=pool_tick.tick_index_1_to_0 * (1 if forward else -1),
            price=pool_tick.price_1_to_0 if forward else 1 / pool_tick.price_1_to_0,
            reserve_self=self_reserve,
            reserve_other=other_reserve,
            fee=pool_tick.fee,
        )

    token0_group = [_to_tick(tick, False) for tick in token0_ticks]
    token1_group = [_to_tick(tick, True) for tick in token1_ticks]
    if forward:
        return token0_group, token1_group
    return token1_group, token0_group
