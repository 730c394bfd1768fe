"""
End-to-end tests for the entry point wiring.

Runs on devnet so the Jupiter adapter answers with simulated quotes and
prices; nothing leaves the process.
"""

import pytest

from principia.config.settings import AppConfig
from principia.main import build_loop, parse_args, run
from principia.market_data.price_feed import JupiterPriceFeed, SimulatedPriceFeed


def devnet_config(**market):
    return AppConfig.model_validate({
        'trading': {'updateInterval': 0.01, 'portfolioValue': 100.0},
        'marketData': {'network': 'devnet', 'simulationSeed': 11, **market},
    })


def test_build_loop_uses_random_walk_by_default():
    loop = build_loop(devnet_config())

    assert isinstance(loop.pipeline.feed, SimulatedPriceFeed)
    assert loop.gate.quote_provider.is_simulated
    assert loop.gate.dry_run is True
    assert list(loop.engines) == ["SOL-USDC"]


def test_build_loop_with_price_api_feed():
    loop = build_loop(devnet_config(simulatedFeed=False))

    assert isinstance(loop.pipeline.feed, JupiterPriceFeed)
    assert loop.pipeline.feed.adapter is loop.gate.quote_provider


@pytest.mark.asyncio
async def test_run_fixed_number_of_cycles():
    loop = await run(devnet_config(), cycles=25)

    assert loop.cycles_completed == 25
    assert loop.cycles_failed == 0
    assert len(loop.pipeline.get_price_history("SOL-USDC")) == 25
    assert loop.is_running is False


@pytest.mark.asyncio
async def test_run_with_price_api_feed_on_devnet():
    loop = await run(devnet_config(simulatedFeed=False), cycles=3)

    price = loop.pipeline.get_current_price("SOL-USDC")
    assert 100.0 <= price < 110.0
    assert loop.cycles_completed == 3


def test_parse_args():
    args = parse_args(["--config-dir", "/etc/principia", "--api", "--cycles", "10"])

    assert args.config_dir == "/etc/principia"
    assert args.api is True
    assert args.cycles == 10

    defaults = parse_args([])
    assert defaults.config_dir is None
    assert defaults.api is False
    assert defaults.cycles is None
