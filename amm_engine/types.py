"""
Data types for the AMM engine.

Design notes:
- Using NamedTuple for immutable, memory-efficient structures
- Every engine call takes these values and returns new ones; nothing is mutated
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional


class Side(str, Enum):
    BID = "BID"
    ASK = "ASK"


class ImpactTier(str, Enum):
    """Caller-facing price impact classification."""
    SAFE = "SAFE"          # < 1%
    CAUTION = "CAUTION"    # 1-5%
    HIGH = "HIGH"          # > 5%


class PriceRange(NamedTuple):
    """Concentrated-liquidity style position bounds. Always lower < upper."""
    lower: float
    upper: float


class AxisWindow(NamedTuple):
    """Visible price window of the chart axis."""
    price_min: float
    price_max: float


class Candle(NamedTuple):
    open: float
    high: float
    low: float
    close: float


class Quote(NamedTuple):
    """
    Swap quote for a single input amount.

    Recomputed on every amount/slippage change, never persisted.
    """
    rate: float
    amount_out: float
    price_impact_pct: float
    min_received: float

    @classmethod
    def zero(cls, rate: float = 0.0) -> Quote:
        return cls(rate=rate, amount_out=0.0, price_impact_pct=0.0, min_received=0.0)

    @property
    def impact_tier(self) -> ImpactTier:
        from .engine.quote import classify_price_impact
        return classify_price_impact(self.price_impact_pct)


class LiquiditySample(NamedTuple):
    """Raw liquidity observation from the market-data provider."""
    price: float
    liquidity: float
    side: Optional[Side] = None  # None = classify against the mid price


class DepthLevel(NamedTuple):
    """Single ladder level with running cumulative liquidity."""
    price: float
    liquidity: float             # Quote-token liquidity at this level
    cumulative_liquidity: float  # Sum of this and all better levels

    @property
    def size(self) -> float:
        """Base-token size of the level."""
        return self.liquidity / self.price if self.price > 0 else 0.0


class DepthBook(NamedTuple):
    """
    Complete depth snapshot for order-book style rendering.

    Rebuilt wholesale on every refresh.
    """
    bids: list[DepthLevel]       # Best (highest) first
    asks: list[DepthLevel]       # Best (lowest) first
    best_bid: Optional[float]    # None if no bids
    best_ask: Optional[float]    # None if no asks
    spread_pct: Optional[float]  # None unless both sides are present
    mid_price: Optional[float]

    @property
    def spread_bps(self) -> Optional[float]:
        return self.spread_pct * 100 if self.spread_pct is not None else None

    @property
    def total_bid_liquidity(self) -> float:
        return self.bids[-1].cumulative_liquidity if self.bids else 0.0

    @property
    def total_ask_liquidity(self) -> float:
        return self.asks[-1].cumulative_liquidity if self.asks else 0.0

    @property
    def is_empty(self) -> bool:
        return not self.bids and not self.asks


class RangePreset(NamedTuple):
    """One-click range around the current price."""
    key: str
    label: str
    lower_multiplier: float
    upper_multiplier: float
    apr_multiplier: float
