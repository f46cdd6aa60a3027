"""
Swap quote engine.

HOT PATH: compute_quote() is called on every amount or slippage change.

Model:
1. rate = price_in / price_out (quote-per-base ratio of the two tokens)
2. Price impact is proportional to the share of pool depth consumed:
   impact = amount_in / pool_depth_in * K, clamped to [0, 100]
3. Real reserves are not always available to the caller, so pool depth can
   be approximated from a wallet-visible balance: depth = balance * 1000
   (depth_multiplier). K is a tunable, not a calibrated constant.
4. min_received = amount_out * (1 - slippage / 100)
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional

from ..errors import InsufficientBalanceError, InvalidAmountError, InvalidPriceError
from ..types import ImpactTier, Quote
from .range_model import is_positive_finite

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_IMPACT_K = 100.0
DEFAULT_DEPTH_MULTIPLIER = 1000.0
DEFAULT_SLIPPAGE_PCT = 0.5
SLIPPAGE_WARNING_PCT = 5.0
IMPACT_CAUTION_PCT = 1.0
IMPACT_HIGH_PCT = 5.0


def classify_price_impact(
    impact_pct: float,
    caution_pct: float = IMPACT_CAUTION_PCT,
    high_pct: float = IMPACT_HIGH_PCT,
) -> ImpactTier:
    """<1% safe, 1-5% caution, >5% high."""
    if impact_pct > high_pct:
        return ImpactTier.HIGH
    if impact_pct >= caution_pct:
        return ImpactTier.CAUTION
    return ImpactTier.SAFE


def clamp_slippage(slippage_pct: float) -> float:
    """Clamp slippage tolerance to [0, 100]. NaN counts as no tolerance."""
    if math.isnan(slippage_pct):
        return 0.0
    return max(0.0, min(100.0, slippage_pct))


def validate_amount(amount: float) -> float:
    if not math.isfinite(amount) or amount < 0:
        raise InvalidAmountError(amount)
    return float(amount)


class QuoteEngine:
    """
    Quote calculator for a single pool.

    Holds only tunables; every call is pure.
    """

    __slots__ = (
        'impact_k', 'depth_multiplier', 'default_slippage_pct', 'slippage_warning_pct',
        'impact_caution_pct', 'impact_high_pct',
    )

    def __init__(
        self,
        impact_k: float = DEFAULT_IMPACT_K,
        depth_multiplier: float = DEFAULT_DEPTH_MULTIPLIER,
        default_slippage_pct: float = DEFAULT_SLIPPAGE_PCT,
        slippage_warning_pct: float = SLIPPAGE_WARNING_PCT,
        impact_caution_pct: float = IMPACT_CAUTION_PCT,
        impact_high_pct: float = IMPACT_HIGH_PCT,
    ) -> None:
        self.impact_k = impact_k
        self.depth_multiplier = depth_multiplier
        self.default_slippage_pct = default_slippage_pct
        self.slippage_warning_pct = slippage_warning_pct
        self.impact_caution_pct = impact_caution_pct
        self.impact_high_pct = impact_high_pct

    @classmethod
    def from_config(cls, config: EngineConfig) -> QuoteEngine:
        q = config.quote
        return cls(
            impact_k=q.impact_k,
            depth_multiplier=q.depth_multiplier,
            default_slippage_pct=q.default_slippage_pct,
            slippage_warning_pct=q.slippage_warning_pct,
            impact_caution_pct=q.impact_caution_pct,
            impact_high_pct=q.impact_high_pct,
        )

    def compute_rate(self, price_in: float, price_out: float) -> float:
        """Output tokens per input token. Raises InvalidPriceError, never divides by zero."""
        if not is_positive_finite(price_in):
            raise InvalidPriceError(price_in)
        if not is_positive_finite(price_out):
            raise InvalidPriceError(price_out)
        return price_in / price_out

    def depth_from_balance(self, balance: float) -> float:
        """Pool depth proxy used when real reserves are unknown."""
        if not math.isfinite(balance) or balance <= 0:
            return 0.0
        return balance * self.depth_multiplier

    def compute_price_impact_pct(
        self,
        amount_in: float,
        pool_depth_in: float,
        pool_depth_out: float,
    ) -> float:
        """
        Estimated price impact in percent, in [0, 100].

        Zero, negative or non-finite amounts have no impact. A positive
        amount against an empty pool moves the price all the way.
        """
        if not math.isfinite(amount_in) or amount_in <= 0:
            return 0.0
        if not is_positive_finite(pool_depth_in) or not is_positive_finite(pool_depth_out):
            return 100.0
        impact = amount_in / pool_depth_in * self.impact_k
        return max(0.0, min(100.0, impact))

    def compute_quote(
        self,
        amount_in: float,
        price_in: float,
        price_out: float,
        pool_depth_in: float,
        pool_depth_out: float,
        slippage_pct: Optional[float] = None,
    ) -> Quote:
        """
        Full quote for `amount_in` input tokens.

        HOT PATH - called on every keystroke in the amount field.

        Invalid amounts or prices give a zero quote instead of raising.
        """
        try:
            amount = validate_amount(amount_in)
            rate = self.compute_rate(price_in, price_out)
        except InvalidAmountError as e:
            logger.debug("zero quote: %s", e.message)
            return Quote.zero()
        except InvalidPriceError as e:
            logger.debug("zero quote: %s", e.message)
            return Quote.zero()

        amount_out = amount * rate
        if not math.isfinite(amount_out):
            logger.debug("zero quote: overflow for amount %s at rate %s", amount, rate)
            return Quote.zero()
        if slippage_pct is None:
            slippage_pct = self.default_slippage_pct
        slippage = clamp_slippage(slippage_pct)

        min_received = amount_out * (1 - slippage / 100)
        # Any positive tolerance must lower the floor, even below float resolution
        if slippage > 0 and amount_out > 0 and min_received >= amount_out:
            min_received = math.nextafter(amount_out, 0.0)

        return Quote(
            rate=rate,
            amount_out=amount_out,
            price_impact_pct=self.compute_price_impact_pct(amount, pool_depth_in, pool_depth_out),
            min_received=min_received,
        )

    def validate_swap(self, amount_in: float, balance: float) -> float:
        """
        Check a requested swap amount against the wallet balance.

        Returns the amount as a float. Raises InvalidAmountError for a
        missing, zero, negative or non-finite amount and
        InsufficientBalanceError when it exceeds the balance.
        """
        if not is_positive_finite(amount_in):
            raise InvalidAmountError(amount_in)
        available = balance if is_positive_finite(balance) else 0.0
        if amount_in > available:
            raise InsufficientBalanceError(amount_in, available)
        return float(amount_in)

    def classify(self, impact_pct: float) -> ImpactTier:
        return classify_price_impact(impact_pct, self.impact_caution_pct, self.impact_high_pct)

    def is_high_slippage(self, slippage_pct: float) -> bool:
        return clamp_slippage(slippage_pct) > self.slippage_warning_pct
