import logging
import math
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple, Union

from tickdepth.pricing import price_to_tick_index
from tickdepth.types import EquilibriumCandidate, Tick

logger = logging.getLogger(__name__)


def build_candidates(
    token_a_ticks: Sequence[Tick], token_b_ticks: Sequence[Tick]
) -> Tuple[EquilibriumCandidate, ...]:
    # tokenA reserves sit below the price (low side), tokenB reserves above it
    candidates: List[EquilibriumCandidate] = [
        EquilibriumCandidate(tick.virtual_price, tick.reserve_self, tick.reserve_other)
        for tick in token_a_ticks
    ]
    candidates.extend(
        EquilibriumCandidate(tick.virtual_price, tick.reserve_other, tick.reserve_self)
        for tick in token_b_ticks
    )
    return tuple(sorted(candidates, key=lambda candidate: candidate.virtual_price))


def find_equilibrium_price(
    token_a_ticks: Sequence[Tick], token_b_ticks: Sequence[Tick]
) -> Optional[Decimal]:
    """Price where bid and ask liquidity meet, or None if either side runs dry."""
    candidates = build_candidates(token_a_ticks, token_b_ticks)
    live = [True] * len(candidates)
    high_cursor = len(candidates) - 1
    low_cursor = 0

    for _ in range(len(candidates) + 1):
        while high_cursor >= 0 and not (
            live[high_cursor] and candidates[high_cursor].reserve_low > 0
        ):
            high_cursor -= 1
        while low_cursor < len(candidates) and not (
            live[low_cursor] and candidates[low_cursor].reserve_high > 0
        ):
            low_cursor += 1
        if high_cursor < 0 or low_cursor >= len(candidates):
            return None

        highest = candidates[high_cursor]
        lowest = candidates[low_cursor]
        if lowest.virtual_price == highest.virtual_price:
            return lowest.virtual_price
        if lowest.virtual_price > highest.virtual_price:
            return (lowest.virtual_price + highest.virtual_price) / 2

        if highest.low_value <= lowest.high_value:
            logger.debug(
                "Discarding low-side outlier at %s (value %s)",
                highest.virtual_price,
                highest.low_value,
            )
            live[high_cursor] = False
        else:
            logger.debug(
                "Discarding high-side outlier at %s (value %s)",
                lowest.virtual_price,
                lowest.high_value,
            )
            live[low_cursor] = False

    return None


def resolve_edge_price_index(
    token_a_ticks: Sequence[Tick],
    token_b_ticks: Sequence[Tick],
    initial_price: Union[Decimal, float, str, None] = None,
) -> Optional[float]:
    equilibrium_price = find_equilibrium_price(token_a_ticks, token_b_ticks)
    if equilibrium_price is not None:
        return price_to_tick_index(equilibrium_price)
    # fall back to the user's proposed starting price for a new pair
    if initial_price is not None and initial_price != "":
        index = price_to_tick_index(initial_price, rounding="round")
        if not math.isnan(index):
            return index
    return None
