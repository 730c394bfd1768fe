"""
Unit tests for IndicatorPipeline and the price feeds.

Tests:
- Observation assembly (SMA, signal, key levels, placeholder volume)
- Bounded per-pair history
- NetworkError propagation without touching history
- Seeded random walk
"""

import random

import pytest

from principia.core.exceptions import NetworkError
from principia.market_data.pipeline import IndicatorPipeline
from principia.market_data.price_feed import SimulatedPriceFeed

from tests.fakes import ScriptedFeed


@pytest.mark.asyncio
async def test_first_observation_has_no_signal():
    pipeline = IndicatorPipeline(ScriptedFeed([100.0]), rng=random.Random(1))

    obs = await pipeline.observe("SOL-USDC", portfolio_value=10.0)

    assert obs.pair == "SOL-USDC"
    assert obs.price == 100.0
    assert obs.signal_strength == 0.0
    assert obs.key_levels == ()
    assert obs.momentum == 0.0
    assert obs.sma20 == 100.0
    assert obs.portfolio_value == 10.0
    assert 1000.0 <= obs.volume < 1500.0


@pytest.mark.asyncio
async def test_signal_starts_after_twenty_samples():
    prices = [100.0 + i for i in range(21)]
    pipeline = IndicatorPipeline(ScriptedFeed(prices))

    for _ in range(19):
        obs = await pipeline.observe("SOL-USDC")
        assert obs.signal_strength == 0.0

    obs = await pipeline.observe("SOL-USDC")
    sma = sum(prices[:20]) / 20
    assert obs.signal_strength == pytest.approx(min(1.0, (119.0 - sma) / sma * 10))
    assert obs.signal_strength > 0


@pytest.mark.asyncio
async def test_observation_carries_key_levels():
    prices = [100.0, 101.0, 100.0, 99.0, 100.0, 101.0, 102.0, 101.0, 100.0, 100.0]
    pipeline = IndicatorPipeline(ScriptedFeed(prices))

    for _ in prices:
        obs = await pipeline.observe("SOL-USDC")

    assert [level.price for level in obs.key_levels] == [101.0, 99.0, 102.0]


@pytest.mark.asyncio
async def test_history_is_capped_at_one_hundred():
    prices = [float(100 + i) for i in range(105)]
    pipeline = IndicatorPipeline(ScriptedFeed(prices))

    for _ in prices:
        await pipeline.observe("SOL-USDC")

    history = pipeline.get_price_history("SOL-USDC", count=1000)
    assert len(history) == 100
    assert history[0] == 105.0
    assert history[-1] == 204.0
    assert pipeline.get_price_history("SOL-USDC", count=3) == [202.0, 203.0, 204.0]
    assert pipeline.get_current_price("SOL-USDC") == 204.0


@pytest.mark.asyncio
async def test_unknown_pair_has_no_price():
    pipeline = IndicatorPipeline(ScriptedFeed([100.0]))

    assert pipeline.get_current_price("SOL-USDC") == 0.0
    assert pipeline.get_price_history("SOL-USDC") == []


@pytest.mark.asyncio
async def test_feed_failure_propagates_and_keeps_history():
    feed = ScriptedFeed([100.0])
    pipeline = IndicatorPipeline(feed)
    await pipeline.observe("SOL-USDC")

    feed.error = NetworkError("connection refused")
    with pytest.raises(NetworkError):
        await pipeline.observe("SOL-USDC")

    assert pipeline.get_price_history("SOL-USDC") == [100.0]
    assert pipeline.get_current_price("SOL-USDC") == 100.0


@pytest.mark.asyncio
async def test_pairs_are_tracked_independently():
    pipeline = IndicatorPipeline(SimulatedPriceFeed(seed=3))

    for _ in range(5):
        await pipeline.observe("SOL-USDC")
    await pipeline.observe("BONK-USDC")

    assert len(pipeline.get_price_history("SOL-USDC")) == 5
    assert len(pipeline.get_price_history("BONK-USDC")) == 1
    assert sorted(pipeline.pairs()) == ["BONK-USDC", "SOL-USDC"]


@pytest.mark.asyncio
async def test_seeded_random_walk_is_reproducible():
    first, second = SimulatedPriceFeed(seed=42), SimulatedPriceFeed(seed=42)

    last_a = last_b = None
    for _ in range(50):
        last_a = await first.next_price("SOL-USDC", last_a)
        last_b = await second.next_price("SOL-USDC", last_b)
        assert last_a == last_b
        assert last_a > 0


@pytest.mark.asyncio
async def test_random_walk_steps_at_most_one():
    feed = SimulatedPriceFeed(seed=7)

    start = await feed.next_price("SOL-USDC", None)
    assert 99.0 <= start <= 101.0

    step = await feed.next_price("SOL-USDC", start)
    assert abs(step - start) <= 1.0
