"""
Main entry point for the Principia trading bot.

Wires config -> Jupiter adapter -> indicator pipeline -> execution gate ->
trading loop, and optionally serves the status API with uvicorn.

Usage:
    principia-bot --config-dir config
    principia-bot --config-dir config --api
    principia-bot --cycles 50
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import List, Optional

import uvicorn

from principia.api import create_app
from principia.config.loader import ConfigLoader
from principia.config.settings import AppConfig
from principia.core.exceptions import ConfigurationError
from principia.execution.gate import ExecutionGate
from principia.integrations.dex.jupiter_adapter import JupiterAdapter
from principia.market_data.pipeline import IndicatorPipeline
from principia.market_data.price_feed import JupiterPriceFeed, SimulatedPriceFeed
from principia.trading_engine.loop import TradingLoop
from principia.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def build_loop(config: AppConfig) -> TradingLoop:
    """Create every component from a validated configuration."""
    market = config.market_data
    trading = config.trading
    seed = market.simulation_seed

    adapter = JupiterAdapter(
        base_url=market.jupiter_api,
        price_url=market.price_api,
        network=market.network,
        timeout_seconds=trading.quote_timeout_seconds,
        rng=random.Random(seed),
    )

    if market.simulated_feed:
        feed = SimulatedPriceFeed(seed=seed)
    else:
        feed = JupiterPriceFeed(adapter, config.tokens)

    pipeline = IndicatorPipeline(feed, rng=random.Random(seed))

    gate = ExecutionGate(
        adapter,
        config.tokens,
        dry_run=trading.dry_run,
        min_trade_size=trading.min_trade_size,
        slippage_bps=trading.slippage_bps,
        history_capacity=trading.history_capacity,
    )

    return TradingLoop(config, pipeline, gate)


async def run(config: AppConfig, serve_api: bool = False, cycles: Optional[int] = None) -> TradingLoop:
    """Run the trading loop (and the status API) until stopped."""
    loop = build_loop(config)

    try:
        if not serve_api:
            await loop.start(max_cycles=cycles)
            return loop

        server = uvicorn.Server(uvicorn.Config(
            create_app(loop),
            host=config.system.api_host,
            port=config.system.api_port,
            log_level=str(config.system.log_level).lower(),
        ))

        loop_task = asyncio.create_task(loop.start(max_cycles=cycles))
        server_task = asyncio.create_task(server.serve())

        done, _ = await asyncio.wait({loop_task, server_task}, return_when=asyncio.FIRST_COMPLETED)

        # Whichever side finished first takes the other down
        if server_task in done:
            await loop.stop()
            await loop_task
        else:
            server.should_exit = True
            await server_task

        return loop
    finally:
        await loop.pipeline.close()
        await loop.gate.quote_provider.close()


def _log_summary(loop: TradingLoop) -> None:
    stats = loop.gate.get_statistics()
    logger.info("=" * 70)
    logger.info("Session summary")
    logger.info(f"  • Cycles: {loop.cycles_completed} completed, {loop.cycles_failed} failed")
    logger.info(f"  • Dropped ticks: {sum(loop.dropped_ticks.values())}")
    logger.info(
        f"  • Trades: {stats.total_trades} total, {stats.successful_trades} successful, "
        f"{stats.dry_run_trades} dry run ({stats.success_rate}%)"
    )
    for pair, state in loop.get_states().items():
        logger.info(f"  • {pair}: {state['position']} size={state['position_size']:.4f}")
    logger.info("=" * 70)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="principia-bot",
        description="Principia trading bot: Newtonian signal engine on Solana via Jupiter",
    )
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory containing config.yaml (default: ./config of the project)",
    )
    parser.add_argument(
        "--api",
        action="store_true",
        help="Serve the status API while trading",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop after this many ticks (default: run until interrupted)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the application."""
    args = parse_args(argv)

    try:
        config = ConfigLoader(args.config_dir).load_app_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(
        log_level=config.system.log_level,
        log_file=config.system.log_file,
        json_format=config.system.json_logs,
    )

    logger.info("=" * 70)
    logger.info("Principia Trading Bot - Starting")
    logger.info(f"  • Network: {config.market_data.network}")
    logger.info(f"  • Pairs: {', '.join(config.trading.pairs)}")
    logger.info(f"  • Mode: {'DRY RUN' if config.trading.dry_run else 'LIVE'}")
    if args.api:
        logger.info(f"  • Status API on http://{config.system.api_host}:{config.system.api_port}")
    logger.info("=" * 70)

    try:
        loop = asyncio.run(run(config, serve_api=args.api, cycles=args.cycles))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0

    _log_summary(loop)
    return 0


if __name__ == "__main__":
    sys.exit(main())
