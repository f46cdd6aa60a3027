#!/usr/bin/env python3
"""
Micro-benchmark for AMM engine performance.

Tests:
1. Quote computation throughput (per keystroke)
2. Range drag update throughput (per pointer move)
3. Depth book build speed (per refresh tick)
4. Depth truncation speed

Usage:
    python -m amm_engine.benchmark
    python -m amm_engine.benchmark --config engine.yaml
"""

from __future__ import annotations

import argparse
import logging
import random
import time
from statistics import mean, stdev

from .config import EngineConfig, load_config
from .datafeed.synthetic import SyntheticMarketData, candle_prices
from .engine.depth import DepthAggregator
from .engine.quote import QuoteEngine
from .engine.range_model import RangeModel, seed_range
from .log import setup_logger

logger = logging.getLogger("amm_engine.benchmark")

BASE_PRICE = 2450.0


def benchmark_quotes(config: EngineConfig, iterations: int = 100000) -> None:
    """Benchmark quote computation throughput."""
    print("\n=== Quote Benchmark ===")

    engine = QuoteEngine.from_config(config)
    depth_in = engine.depth_from_balance(2.5)
    depth_out = engine.depth_from_balance(6000.0)

    amounts = [random.uniform(0, 10) for _ in range(iterations)]

    start = time.perf_counter()
    for amount in amounts:
        engine.compute_quote(amount, BASE_PRICE, 1.0, depth_in, depth_out, 0.5)
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Quotes computed: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} quotes/sec")
    print(f"  Per quote: {elapsed/iterations*1_000_000:.2f}µs")


def benchmark_range_drag(config: EngineConfig, iterations: int = 100000) -> None:
    """Benchmark drag updates, including window recomputation per move."""
    print("\n=== Range Drag Benchmark ===")

    model = RangeModel.from_config(config)
    feed = SyntheticMarketData(seed=1)
    samples = candle_prices(feed.generate_candles(BASE_PRICE, 35))
    price_range = seed_range(BASE_PRICE, config.range.default_range_pct)

    coords = [random.uniform(0, 100) for _ in range(iterations)]
    rejected = 0

    start = time.perf_counter()
    for i, coord in enumerate(coords):
        window = model.compute_axis_window(samples, price_range)
        bound = 'lower' if i % 2 == 0 else 'upper'
        updated = model.drag_to(bound, coord, price_range, window)
        if updated is price_range:
            rejected += 1
        price_range = updated
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Drag moves: {iterations:,} ({rejected:,} rejected)")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} moves/sec")
    print(f"  Final range: {price_range.lower:.2f} - {price_range.upper:.2f}")


def benchmark_build_book(config: EngineConfig, iterations: int = 1000) -> None:
    """Benchmark depth book generation."""
    print("\n=== Depth Book Build Benchmark ===")

    aggregator = DepthAggregator.from_config(config)
    feed = SyntheticMarketData(seed=2)
    samples = feed.generate_order_book(BASE_PRICE, levels=500)
    samples += feed.generate_liquidity_depth(BASE_PRICE, bins=500)

    # Warm up
    for _ in range(10):
        aggregator.build_book(samples, BASE_PRICE)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        aggregator.build_book(samples, BASE_PRICE)
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000

    print(f"  Samples: {len(samples):,}")
    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.3f}ms")
    print(f"  Std dev: {std_time:.3f}ms")
    print(f"  Rate: {1000/avg_time:,.0f} books/sec")


def benchmark_limit_depth(config: EngineConfig, iterations: int = 10000) -> None:
    """Benchmark truncation of a built book (what the ladder view needs)."""
    print("\n=== Depth Truncation Benchmark ===")

    aggregator = DepthAggregator.from_config(config)
    feed = SyntheticMarketData(seed=3)
    book = aggregator.build_book(feed.generate_order_book(BASE_PRICE, levels=1000), BASE_PRICE)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        aggregator.limit_depth(book)
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1_000_000

    print(f"  Iterations: {iterations:,}")
    print(f"  Levels kept: {aggregator.max_levels}")
    print(f"  Avg time: {avg_time:.2f}µs")
    print(f"  Spread: {book.spread_pct:.4f}%")


def main() -> None:
    """Run all benchmarks."""
    parser = argparse.ArgumentParser(description="AMM engine micro-benchmark")
    parser.add_argument("--config", default=None, help="YAML engine config (default: built-in)")
    parser.add_argument("--verbose", action="store_true", help="Log engine rejections")
    args = parser.parse_args()

    setup_logger(logging.DEBUG if args.verbose else logging.INFO)
    config = load_config(args.config)
    logger.info("loaded config: %s", config.model_dump())

    print("=" * 60)
    print("AMM Engine Performance Benchmark")
    print("=" * 60)

    benchmark_quotes(config)
    benchmark_range_drag(config)
    benchmark_build_book(config)
    benchmark_limit_depth(config)

    print("\n" + "=" * 60)
    print("Benchmark complete.")
    print("=" * 60)


if __name__ == "__main__":
    main()
