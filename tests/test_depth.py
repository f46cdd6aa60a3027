import math

import pytest

from amm_engine.config import DepthCfg, EngineConfig
from amm_engine.datafeed.synthetic import SyntheticMarketData
from amm_engine.engine.depth import DepthAggregator, build_book, limit_depth
from amm_engine.types import DepthBook, DepthLevel, LiquiditySample, Side


def _ladder_around_100() -> list[LiquiditySample]:
    """10 bids at 91-100 and 10 asks at 100.5-109.5, shuffled order."""
    samples = []
    for i in range(10):
        samples.append(LiquiditySample(100.0 - i, 10.0 + i))
        samples.append(LiquiditySample(100.5 + i, 5.0 + i))
    samples.reverse()
    return samples


def _assert_monotone(levels: list[DepthLevel]) -> None:
    for a, b in zip(levels, levels[1:]):
        assert a.cumulative_liquidity <= b.cumulative_liquidity


class TestBuildBook:
    def test_empty_samples(self) -> None:
        book = build_book([], 100.0)
        assert book.bids == []
        assert book.asks == []
        assert book.best_bid is None
        assert book.best_ask is None
        assert book.spread_pct is None
        assert book.is_empty

    def test_ladder_around_mid(self) -> None:
        book = build_book(_ladder_around_100(), 100.0)
        assert len(book.bids) == 10
        assert len(book.asks) == 10
        assert book.bids[0].price == 100.0
        assert book.asks[0].price == 100.5
        assert book.best_bid == 100.0
        assert book.best_ask == 100.5
        assert book.spread_pct == pytest.approx((100.5 - 100.0) / 100 * 100)
        assert book.mid_price == 100.0

    def test_sort_order(self) -> None:
        book = build_book(_ladder_around_100(), 100.0)
        bid_prices = [lvl.price for lvl in book.bids]
        ask_prices = [lvl.price for lvl in book.asks]
        assert bid_prices == sorted(bid_prices, reverse=True)
        assert ask_prices == sorted(ask_prices)

    def test_cumulative_totals(self) -> None:
        book = build_book(_ladder_around_100(), 100.0)
        assert book.bids[0].cumulative_liquidity == 10.0
        assert book.bids[1].cumulative_liquidity == 21.0
        assert book.total_bid_liquidity == pytest.approx(sum(10.0 + i for i in range(10)))
        assert book.total_ask_liquidity == pytest.approx(sum(5.0 + i for i in range(10)))

    def test_cumulative_monotone_on_synthetic_data(self) -> None:
        feed = SyntheticMarketData(seed=11)
        samples = feed.generate_order_book(2450.0, levels=50) + feed.generate_liquidity_depth(2450.0)
        book = build_book(samples, 2450.0)
        _assert_monotone(book.bids)
        _assert_monotone(book.asks)

    def test_price_at_mid_is_a_bid(self) -> None:
        book = build_book([LiquiditySample(100.0, 1.0)], 100.0)
        assert book.best_bid == 100.0
        assert book.asks == []

    def test_explicit_side_overrides_mid(self) -> None:
        book = build_book([LiquiditySample(90.0, 1.0, Side.ASK)], 100.0)
        assert book.bids == []
        assert book.best_ask == 90.0

    @pytest.mark.parametrize("liquidity", [0.0, -5.0, math.nan, math.inf])
    def test_invalid_liquidity_dropped(self, liquidity: float) -> None:
        book = build_book([LiquiditySample(99.0, liquidity), LiquiditySample(98.0, 2.0)], 100.0)
        assert [lvl.price for lvl in book.bids] == [98.0]

    def test_invalid_price_dropped(self) -> None:
        book = build_book([LiquiditySample(-1.0, 5.0), LiquiditySample(math.nan, 5.0)], 100.0)
        assert book.is_empty

    def test_one_sided_book(self) -> None:
        book = build_book([LiquiditySample(99.0, 3.0), LiquiditySample(98.0, 2.0)], 100.0)
        assert book.best_bid == 99.0
        assert book.best_ask is None
        assert book.spread_pct is None
        assert book.spread_bps is None

    def test_duplicate_prices_merge(self) -> None:
        book = build_book([LiquiditySample(99.0, 3.0), LiquiditySample(99.0, 2.0)], 100.0)
        assert book.bids == [DepthLevel(99.0, 5.0, 5.0)]

    def test_invalid_hint_falls_back_to_best_prices(self) -> None:
        samples = [LiquiditySample(99.0, 1.0, Side.BID), LiquiditySample(101.0, 1.0, Side.ASK)]
        book = build_book(samples, None)
        assert book.mid_price == 100.0
        assert book.spread_pct == pytest.approx(2.0)

    def test_untagged_samples_need_a_hint(self) -> None:
        book = build_book([LiquiditySample(99.0, 1.0)], math.nan)
        assert book.is_empty

    def test_level_size(self) -> None:
        book = build_book([LiquiditySample(50.0, 100.0)], 100.0)
        assert book.bids[0].size == 2.0


class TestBucketing:
    def test_bids_floor_asks_ceil(self) -> None:
        agg = DepthAggregator(bin_size=1.0)
        samples = [
            LiquiditySample(99.2, 1.0),
            LiquiditySample(99.7, 2.0),
            LiquiditySample(100.2, 3.0),
            LiquiditySample(100.6, 4.0),
        ]
        book = agg.build_book(samples, 100.0)
        assert book.bids == [DepthLevel(99.0, 3.0, 3.0)]
        assert book.asks == [DepthLevel(101.0, 7.0, 7.0)]

    def test_bid_below_first_bin_is_dropped(self) -> None:
        book = DepthAggregator(bin_size=1.0).build_book([LiquiditySample(0.5, 3.0)], 2.0)
        assert book.bids == []
        assert book.best_bid is None

    @pytest.mark.parametrize(
        "price,bin_size,side,bucket",
        [
            (0.3, 0.1, Side.BID, 0.3),
            (0.3, 0.1, Side.ASK, 0.3),
            (0.35, 0.1, Side.BID, 0.3),
            (0.35, 0.1, Side.ASK, 0.4),
            (2450.37, 0.05, Side.BID, 2450.35),
            (2450.37, 0.05, Side.ASK, 2450.4),
        ],
    )
    def test_fractional_bins(self, price: float, bin_size: float, side: Side, bucket: float) -> None:
        book = DepthAggregator(bin_size=bin_size).build_book([LiquiditySample(price, 1.0, side)], None)
        levels = book.bids if side is Side.BID else book.asks
        assert [level.price for level in levels] == [bucket]

    def test_from_config(self) -> None:
        agg = DepthAggregator.from_config(EngineConfig(depth=DepthCfg(bin_size=0.5, max_levels=3)))
        assert agg.bin_size == 0.5
        assert agg.max_levels == 3


class TestLimitDepth:
    def test_truncates_without_touching_totals(self) -> None:
        book = build_book(_ladder_around_100(), 100.0)
        limited = limit_depth(book, 3)
        assert len(limited.bids) == 3
        assert len(limited.asks) == 3
        assert limited.bids == book.bids[:3]
        assert limited.asks == book.asks[:3]
        assert limited.total_bid_liquidity == book.bids[2].cumulative_liquidity
        assert limited.spread_pct == book.spread_pct

    def test_larger_than_book_is_noop(self) -> None:
        book = build_book(_ladder_around_100(), 100.0)
        assert limit_depth(book, 100) == book

    def test_zero_levels_empties_book(self) -> None:
        book = build_book(_ladder_around_100(), 100.0)
        limited = limit_depth(book, 0)
        assert limited.is_empty
        assert limited.spread_pct is None
        assert limited.mid_price == 100.0

    def test_negative_levels_treated_as_zero(self) -> None:
        book = build_book(_ladder_around_100(), 100.0)
        assert limit_depth(book, -4).is_empty

    def test_default_from_aggregator(self) -> None:
        agg = DepthAggregator(max_levels=2)
        book = agg.build_book(_ladder_around_100(), 100.0)
        assert len(agg.limit_depth(book).bids) == 2

    def test_empty_book(self) -> None:
        empty = DepthBook([], [], None, None, None, None)
        assert limit_depth(empty, 5) == empty
