"""
Depth aggregation engine.

HOT PATH: build_book() runs on every market-data refresh tick.

Strategy:
1. Filter and partition samples in a single pass
2. Optional price bucketing using dict with bucket prices as keys
3. One sort per side (bids descending, asks ascending)
4. Cumulative totals via numpy cumsum over non-negative liquidity, so the
   running totals are monotone non-decreasing by construction
5. The book is rebuilt wholesale; there is no incremental state to go stale
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Iterable, Optional

import numpy as np

from ..types import DepthBook, DepthLevel, LiquiditySample, Side
from .range_model import is_positive_finite

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_LEVELS = 25
BIN_INDEX_DIGITS = 9
BIN_PRICE_DIGITS = 10


def _accumulate(side: list[tuple[float, float]]) -> list[DepthLevel]:
    """Turn sorted (price, liquidity) pairs into levels with running totals."""
    if not side:
        return []
    liquidity = np.fromiter((liq for _, liq in side), dtype=np.float64, count=len(side))
    cumulative = np.cumsum(liquidity)
    return [
        DepthLevel(price, float(liq), float(cum))
        for (price, _), liq, cum in zip(side, liquidity, cumulative)
    ]


def _summarize(
    bids: list[DepthLevel],
    asks: list[DepthLevel],
    mid_price_hint: Optional[float],
) -> DepthBook:
    best_bid = bids[0].price if bids else None
    best_ask = asks[0].price if asks else None

    if is_positive_finite(mid_price_hint):
        mid = mid_price_hint
    elif best_bid is not None and best_ask is not None:
        mid = (best_bid + best_ask) / 2.0
    else:
        mid = best_bid if best_bid is not None else best_ask

    spread_pct = None
    if best_bid is not None and best_ask is not None and mid:
        spread_pct = (best_ask - best_bid) / mid * 100

    return DepthBook(
        bids=bids,
        asks=asks,
        best_bid=best_bid,
        best_ask=best_ask,
        spread_pct=spread_pct,
        mid_price=mid,
    )


class DepthAggregator:
    """
    Builds order-book style depth ladders from raw liquidity samples.

    Holds only tunables; build_book() is pure.
    """

    __slots__ = ('bin_size', 'max_levels')

    def __init__(
        self,
        bin_size: Optional[float] = None,
        max_levels: int = DEFAULT_MAX_LEVELS,
    ) -> None:
        self.bin_size = bin_size
        self.max_levels = max_levels

    @classmethod
    def from_config(cls, config: EngineConfig) -> DepthAggregator:
        return cls(bin_size=config.depth.bin_size, max_levels=config.depth.max_levels)

    def _bucket(self, price: float, side: Side) -> float:
        """
        Round bids down and asks up so bucketing never crosses the book.

        The bin index is rounded before floor/ceil so fractional bins
        (e.g. 0.3 / 0.1 = 2.9999999999999996) land in the right bucket.
        A bid below the first bin buckets to 0.0; the caller drops it.
        """
        if not self.bin_size:
            return price
        index = round(price / self.bin_size, BIN_INDEX_DIGITS)
        if side is Side.BID:
            index = math.floor(index)
        else:
            index = math.ceil(index)
        return round(index * self.bin_size, BIN_PRICE_DIGITS)

    def build_book(
        self,
        samples: Iterable[LiquiditySample],
        mid_price_hint: Optional[float],
    ) -> DepthBook:
        """
        Aggregate samples into a DepthBook.

        Args:
            samples: Unordered liquidity samples; untagged ones are classified
                as bids at or below the mid price hint, asks above it
            mid_price_hint: Current price, used for classification and spread

        Samples with non-positive liquidity or an invalid price are dropped,
        as are bids that bucket down to a zero price.
        An empty input gives an empty book.
        """
        hint_ok = is_positive_finite(mid_price_hint)
        bids: dict[float, float] = {}
        asks: dict[float, float] = {}
        dropped = 0

        for sample in samples:
            if not is_positive_finite(sample.price) or not is_positive_finite(sample.liquidity):
                dropped += 1
                continue

            side = sample.side
            if side is None:
                if not hint_ok:
                    dropped += 1
                    continue
                side = Side.BID if sample.price <= mid_price_hint else Side.ASK

            price = self._bucket(sample.price, side)
            if price <= 0:
                dropped += 1
                continue
            book_side = bids if side is Side.BID else asks
            book_side[price] = book_side.get(price, 0.0) + sample.liquidity

        if dropped:
            logger.debug("dropped %d invalid liquidity samples", dropped)

        sorted_bids = sorted(bids.items(), reverse=True)
        sorted_asks = sorted(asks.items())

        return _summarize(_accumulate(sorted_bids), _accumulate(sorted_asks), mid_price_hint)

    def limit_depth(self, book: DepthBook, max_levels: Optional[int] = None) -> DepthBook:
        """
        Keep the best `max_levels` levels per side.

        Cumulative totals are left as computed; truncation only hides the
        deeper levels.
        """
        if max_levels is None:
            max_levels = self.max_levels
        max_levels = max(0, max_levels)
        return _summarize(book.bids[:max_levels], book.asks[:max_levels], book.mid_price)


def build_book(
    samples: Iterable[LiquiditySample],
    mid_price_hint: Optional[float],
) -> DepthBook:
    """Module-level shortcut using the default aggregator."""
    return DepthAggregator().build_book(samples, mid_price_hint)


def limit_depth(book: DepthBook, max_levels: int) -> DepthBook:
    return DepthAggregator().limit_depth(book, max_levels)
