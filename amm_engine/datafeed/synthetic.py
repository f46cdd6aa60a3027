"""
Synthetic market data for demos, benchmarks and tests.

Stands in for a real market-data provider: the engine treats every sample
as opaque input, so a seeded generator is enough to drive it end to end.
"""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from ..types import Candle, LiquiditySample, Side


def candle_prices(candles: Iterable[Candle]) -> list[float]:
    """Flatten candle highs and lows into axis window samples."""
    prices: list[float] = []
    for c in candles:
        prices.append(c.high)
        prices.append(c.low)
    return prices


class SyntheticMarketData:
    """
    Seeded random market data.

    Usage:
        feed = SyntheticMarketData(seed=7)
        candles = feed.generate_candles(2450.0)
        samples = feed.generate_order_book(2450.0, levels=25)
    """

    __slots__ = ('_rng',)

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = np.random.default_rng(seed)

    def generate_candles(self, base_price: float, count: int = 35) -> list[Candle]:
        """Random-walk candles starting 10% below base price."""
        rng = self._rng
        candles: list[Candle] = []
        price = base_price * 0.9

        for _ in range(count):
            volatility = 0.02 + rng.random() * 0.03
            direction = 1.0 if rng.random() > 0.45 else -1.0

            open_ = price
            close = price + price * volatility * direction
            high = max(open_, close) * (1 + rng.random() * 0.01)
            low = min(open_, close) * (1 - rng.random() * 0.01)

            candles.append(Candle(float(open_), float(high), float(low), float(close)))
            price = close

        return candles

    def generate_liquidity_depth(self, current_price: float, bins: int = 50) -> list[LiquiditySample]:
        """
        Liquidity histogram over +/-30% of the current price.

        Depth decays away from the current price; samples are untagged so
        the aggregator classifies them against the mid price.
        """
        if bins <= 0:
            return []
        price_range = current_price * 0.3
        bin_width = price_range * 2 / bins
        prices = current_price - price_range + np.arange(bins) * bin_width

        distance = np.abs(prices - current_price) / price_range
        base_depth = 100 * (1 - distance * 0.7)
        random_factor = 0.7 + self._rng.random(bins) * 0.6
        depth = np.maximum(10.0, base_depth * random_factor)

        return [LiquiditySample(float(p), float(d)) for p, d in zip(prices, depth)]

    def generate_order_book(self, base_price: float, levels: int = 25) -> list[LiquiditySample]:
        """
        Tagged bid/ask samples: 0.1% spread, 0.5% level spacing, small jitter.

        Liquidity grows with distance from the mid price.
        """
        rng = self._rng
        spread = base_price * 0.001
        samples: list[LiquiditySample] = []

        for i in range(levels):
            jitter = (rng.random() - 0.5) * base_price * 0.001
            bid_price = base_price - spread / 2 - i * base_price * 0.005 + jitter
            bid_liq = (rng.random() * 50000 + 5000) * (1 + i * 0.1)
            samples.append(LiquiditySample(float(bid_price), float(bid_liq), Side.BID))

            jitter = (rng.random() - 0.5) * base_price * 0.001
            ask_price = base_price + spread / 2 + i * base_price * 0.005 + jitter
            ask_liq = (rng.random() * 50000 + 5000) * (1 + i * 0.1)
            samples.append(LiquiditySample(float(ask_price), float(ask_liq), Side.ASK))

        return samples
