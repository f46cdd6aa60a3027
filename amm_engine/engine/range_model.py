"""
Price range model for concentrated-liquidity position entry.

HOT PATH: update_lower_bound()/update_upper_bound() are called on every
pointer move while a bound is being dragged.

Model:
1. The chart axis is a vertical [0, 100] coordinate, 0 = top (price_max)
2. The visible window always contains the range and all chart samples,
   expanded by a small margin
3. Bound updates never cross: a proposal that would bring the bounds within
   bound_gap of each other is dropped and the previous range is returned
4. Nothing is retained between calls; the caller owns the PriceRange
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Iterable, Optional

from ..errors import DegenerateRangeError, InvalidPriceError
from ..types import AxisWindow, PriceRange, RangePreset

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_AXIS_MARGIN = 0.02
DEFAULT_BOUND_GAP = 0.01
DEFAULT_STEP = 0.02
DEFAULT_RANGE_PCT = 10.0

RANGE_PRESETS: dict[str, RangePreset] = {
    'deep': RangePreset('deep', 'Deep', 0.5, 1.5, 0.2),
    'passive': RangePreset('passive', 'Passive', 0.75, 1.25, 0.4),
    'wide': RangePreset('wide', 'Wide', 0.9, 1.1, 1.0),
    'narrow': RangePreset('narrow', 'Narrow', 0.975, 1.025, 4.0),
    'degen': RangePreset('degen', 'Degen', 0.999, 1.001, 200.0),
}


def is_positive_finite(value: float) -> bool:
    """True for finite, strictly positive numbers (prices, depths, liquidity)."""
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False


def make_range(lower: float, upper: float) -> PriceRange:
    """Build a validated PriceRange. Raises on invalid or crossed bounds."""
    if not is_positive_finite(lower):
        raise InvalidPriceError(lower)
    if not is_positive_finite(upper):
        raise InvalidPriceError(upper)
    if lower >= upper:
        raise DegenerateRangeError(lower, upper)
    return PriceRange(float(lower), float(upper))


def map_price_to_axis(price: float, axis_min: float, axis_max: float) -> float:
    """
    Convert a price to a [0, 100] axis coordinate (0 = axis_max).

    Prices outside the window clamp to the edges; while dragging that is a
    normal transient state.
    """
    span = axis_max - axis_min
    if not math.isfinite(span) or span <= 0:
        return 50.0
    if math.isnan(price):
        return 100.0
    coord = (axis_max - price) / span * 100
    return max(0.0, min(100.0, coord))


def map_axis_to_price(coordinate: float, axis_min: float, axis_max: float) -> float:
    """Inverse of map_price_to_axis for coordinates in [0, 100]."""
    if not math.isfinite(coordinate):
        coordinate = 100.0
    coordinate = max(0.0, min(100.0, coordinate))
    span = axis_max - axis_min
    if not math.isfinite(span) or span <= 0:
        return axis_min
    return axis_max - (coordinate / 100) * span


def percent_from_current(bound: float, current_price: float) -> str:
    """Signed distance of a bound from the current price, e.g. '+10.0%'."""
    if not is_positive_finite(bound) or not is_positive_finite(current_price):
        return "+0.0%"
    pct = (bound - current_price) / current_price * 100
    pct = round(pct, 1) or 0.0
    return f"+{pct:.1f}%" if pct >= 0 else f"{pct:.1f}%"


def seed_range(current_price: float, pct: float = DEFAULT_RANGE_PCT) -> PriceRange:
    """Initial range when a position-entry session opens: current +/- pct."""
    if not is_positive_finite(current_price):
        raise InvalidPriceError(current_price)
    return make_range(current_price * (1 - pct / 100), current_price * (1 + pct / 100))


def apply_preset(current_price: float, preset: RangePreset) -> PriceRange:
    if not is_positive_finite(current_price):
        raise InvalidPriceError(current_price)
    return make_range(
        current_price * preset.lower_multiplier,
        current_price * preset.upper_multiplier,
    )


def preset_apr(base_apr: float, preset: RangePreset) -> float:
    """Estimated APR of a preset, scaled by its concentration."""
    return base_apr * preset.apr_multiplier


class RangeModel:
    """
    Stateless range editor.

    Holds only tunables; every method takes the current range and returns
    a new one.
    """

    __slots__ = ('axis_margin', 'bound_gap', 'step')

    def __init__(
        self,
        axis_margin: float = DEFAULT_AXIS_MARGIN,
        bound_gap: float = DEFAULT_BOUND_GAP,
        step: float = DEFAULT_STEP,
    ) -> None:
        self.axis_margin = axis_margin
        self.bound_gap = bound_gap
        self.step = step

    @classmethod
    def from_config(cls, config: EngineConfig) -> RangeModel:
        return cls(
            axis_margin=config.range.axis_margin,
            bound_gap=config.range.bound_gap,
            step=config.range.step,
        )

    def compute_axis_window(
        self,
        samples: Iterable[float],
        price_range: PriceRange,
    ) -> AxisWindow:
        """
        Visible window covering the chart samples and both range bounds.

        Invalid samples are skipped; the range bounds are always included.
        """
        prices = [p for p in samples if is_positive_finite(p)]
        prices.append(price_range.lower)
        prices.append(price_range.upper)
        return AxisWindow(
            price_min=min(prices) * (1 - self.axis_margin),
            price_max=max(prices) * (1 + self.axis_margin),
        )

    def update_lower_bound(
        self,
        proposed: float,
        price_range: PriceRange,
        window: Optional[AxisWindow] = None,
    ) -> PriceRange:
        """
        Move the lower bound to `proposed`.

        HOT PATH - called per drag move.

        Rejected (previous range returned) when the price is invalid or the
        bound would come within bound_gap of the upper bound.
        """
        if not is_positive_finite(proposed):
            logger.debug("lower bound rejected: invalid price %r", proposed)
            return price_range
        if proposed >= price_range.upper * (1 - self.bound_gap):
            logger.debug("lower bound rejected: %s too close to upper %s", proposed, price_range.upper)
            return price_range

        lower = proposed
        if window is not None:
            lower = max(window.price_min, lower)
        # A stale window could push the clamped value past the upper bound
        if lower >= price_range.upper:
            return price_range
        return PriceRange(lower, price_range.upper)

    def update_upper_bound(
        self,
        proposed: float,
        price_range: PriceRange,
        window: Optional[AxisWindow] = None,
    ) -> PriceRange:
        """Mirror of update_lower_bound for the upper bound."""
        if not is_positive_finite(proposed):
            logger.debug("upper bound rejected: invalid price %r", proposed)
            return price_range
        if proposed <= price_range.lower * (1 + self.bound_gap):
            logger.debug("upper bound rejected: %s too close to lower %s", proposed, price_range.lower)
            return price_range

        upper = proposed
        if window is not None:
            upper = min(window.price_max, upper)
        if upper <= price_range.lower:
            return price_range
        return PriceRange(price_range.lower, upper)

    def drag_to(
        self,
        bound: str,
        coordinate: float,
        price_range: PriceRange,
        window: AxisWindow,
    ) -> PriceRange:
        """
        Apply a pointer position on the axis to one bound.

        Args:
            bound: 'lower' or 'upper'
            coordinate: Pointer position in [0, 100] axis units
        """
        price = map_axis_to_price(coordinate, window.price_min, window.price_max)
        if bound == 'lower':
            return self.update_lower_bound(price, price_range, window)
        if bound == 'upper':
            return self.update_upper_bound(price, price_range, window)
        raise ValueError(f"Unknown bound: {bound!r}")

    def step_lower(
        self,
        price_range: PriceRange,
        up: bool,
        window: Optional[AxisWindow] = None,
    ) -> PriceRange:
        factor = 1 + self.step if up else 1 - self.step
        return self.update_lower_bound(price_range.lower * factor, price_range, window)

    def step_upper(
        self,
        price_range: PriceRange,
        up: bool,
        window: Optional[AxisWindow] = None,
    ) -> PriceRange:
        factor = 1 + self.step if up else 1 - self.step
        return self.update_upper_bound(price_range.upper * factor, price_range, window)
