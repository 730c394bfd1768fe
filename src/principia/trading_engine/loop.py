"""
Trading Loop - periodic scheduler driving observe -> analyze -> execute.

One SignalEngine per trading pair. Cycles for the same pair never overlap:
a tick that arrives while the pair's previous cycle is still awaiting the
network is dropped and counted. Different pairs run concurrently.

Engine state is committed only after the cycle's I/O succeeded, so a failed
quote leaves the pair exactly as the last good cycle left it.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from principia.config.settings import AppConfig
from principia.core.exceptions import ConfigurationError, NetworkError, ParseError, ValidationError
from principia.decision.engine import SignalEngine
from principia.decision.models import Decision, MarketObservation
from principia.execution.gate import ExecutionGate
from principia.execution.models import ExecutionResult
from principia.market_data.pipeline import IndicatorPipeline
from principia.utils.logger import get_performance_logger, get_trading_logger

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """What happened during one cycle for one pair."""
    pair: str
    observation: Optional[MarketObservation] = None
    decision: Optional[Decision] = None
    execution: Optional[ExecutionResult] = None
    committed: bool = False
    dropped: bool = False
    error: Optional[str] = None
    duration: float = 0.0

    def to_dict(self) -> dict:
        return {
            'pair': self.pair,
            'price': self.observation.price if self.observation else None,
            'decision': self.decision.to_dict() if self.decision else None,
            'execution': self.execution.to_dict() if self.execution else None,
            'committed': self.committed,
            'dropped': self.dropped,
            'error': self.error,
            'duration': self.duration,
        }


class TradingLoop:
    """
    Owns the per-pair engines and drives them on a timer.

    Usage:
        loop = TradingLoop(app_config, pipeline, gate)
        await loop.start(max_cycles=10)
    """

    def __init__(self, config: AppConfig, pipeline: IndicatorPipeline, gate: ExecutionGate):
        self.config = config
        self.pipeline = pipeline
        self.gate = gate

        self.pairs: List[str] = list(config.trading.pairs)
        self.update_interval = config.trading.update_interval
        self.portfolio_value = config.trading.portfolio_value

        self.engines: Dict[str, SignalEngine] = {}
        for pair in self.pairs:
            self.get_engine(pair)

        self.is_running = False
        self.cycles_completed = 0
        self.cycles_failed = 0
        self.dropped_ticks: Dict[str, int] = {}
        self.last_reports: Dict[str, CycleReport] = {}

        self._in_flight: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()
        self._stop_event: Optional[asyncio.Event] = None

        self.performance = get_performance_logger(f"{__name__}.TradingLoop")
        self.trading_logger = get_trading_logger(f"{__name__}.TradingLoop")

    def get_engine(self, pair: str) -> SignalEngine:
        """Engine bound to `pair`, created on first use."""
        engine = self.engines.get(pair)
        if engine is None:
            engine = SignalEngine(self.config.engine, pair=pair)
            self.engines[pair] = engine
        return engine

    async def run_cycle(self, pair: str) -> CycleReport:
        """
        Run one cycle for `pair`, or drop it if one is already running.

        Never raises for network, parse, validation or token errors; those
        end the cycle without committing engine state.
        """
        if pair in self._in_flight:
            self.dropped_ticks[pair] = self.dropped_ticks.get(pair, 0) + 1
            logger.warning(
                f"[{pair}] Previous cycle still running, tick dropped "
                f"({self.dropped_ticks[pair]} so far)"
            )
            return CycleReport(pair=pair, dropped=True)

        self._in_flight.add(pair)
        start_time = time.time()
        try:
            with self.performance.timer("cycle", pair=pair):
                report = await self._run_cycle(pair)
        finally:
            self._in_flight.discard(pair)

        report.duration = time.time() - start_time
        self.last_reports[pair] = report
        if report.error:
            self.cycles_failed += 1
        else:
            self.cycles_completed += 1
        return report

    async def _run_cycle(self, pair: str) -> CycleReport:
        report = CycleReport(pair=pair)
        engine = self.get_engine(pair)

        try:
            observation = await self.pipeline.observe(pair, self.portfolio_value)
        except (NetworkError, ParseError) as e:
            report.error = f"Market data unavailable: {e}"
            logger.warning(f"[{pair}] Cycle skipped: {report.error}")
            return report
        report.observation = observation

        try:
            decision, new_state = engine.evaluate(observation)
        except ValidationError as e:
            report.error = f"Invalid observation: {e}"
            logger.error(f"[{pair}] Cycle skipped: {report.error}")
            return report
        report.decision = decision

        if decision.is_trade:
            try:
                result = await self.gate.execute_decision(
                    pair, decision, observation.portfolio_value, observation.price
                )
            except ConfigurationError as e:
                report.error = f"Cannot trade {pair}: {e}"
                logger.error(f"[{pair}] Cycle skipped: {report.error}")
                return report
            report.execution = result

            if result.is_failure:
                report.error = f"Execution failed: {result.reason}"
                logger.warning(f"[{pair}] State not committed: {report.error}")
                self.trading_logger.risk_alert(
                    "execution_failed", "high",
                    f"{pair} {decision.action.value} not executed, position left at last committed state",
                    pair=pair, reason=result.reason,
                )
                return report

        engine.commit(new_state)
        engine.log_decision(decision)
        self._check_position_limit(pair, engine, decision, observation)
        report.committed = True
        return report

    def _check_position_limit(
        self,
        pair: str,
        engine: SignalEngine,
        decision: Decision,
        observation: MarketObservation
    ) -> None:
        """Warn when a trade leaves the position pinned at the size limit."""
        if not decision.is_trade:
            return
        limit = observation.portfolio_value * engine.config.max_position_size
        if limit > 0 and abs(decision.position_size) >= limit:
            self.trading_logger.risk_alert(
                "position_limit", "medium",
                f"{pair} position {decision.position_size:.4f} reached the limit of {limit:.4f}",
                pair=pair, position_size=decision.position_size, limit=limit,
            )

    async def tick(self) -> None:
        """Dispatch one cycle per configured pair without waiting for them."""
        for pair in list(self.pairs):
            task = asyncio.create_task(self.run_cycle(pair))
            self._tasks.add(task)
            task.add_done_callback(self._on_cycle_done)

    def _on_cycle_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Cycle crashed: {error}", exc_info=error)

    async def start(self, max_cycles: Optional[int] = None) -> None:
        """
        Tick every update_interval seconds until stop() (or max_cycles ticks).

        Args:
            max_cycles: Number of ticks before stopping on its own
        """
        self.is_running = True
        self._stop_event = asyncio.Event()

        logger.info("=" * 70)
        logger.info(f"Trading loop started: pairs={self.pairs}, interval={self.update_interval}s")
        logger.info(f"  • Dry run: {self.gate.dry_run}")
        logger.info(f"  • Portfolio value: {self.portfolio_value}")
        logger.info("=" * 70)

        ticks = 0
        try:
            while self.is_running:
                await self.tick()
                ticks += 1
                if max_cycles is not None and ticks >= max_cycles:
                    break

                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.update_interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop issuing ticks and wait for in-flight cycles to finish."""
        self.is_running = False
        if self._stop_event is not None:
            self._stop_event.set()

        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} in-flight cycle(s)")
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

        logger.info("Trading loop stopped")

    def apply_config(self, config: AppConfig) -> None:
        """
        Push a reloaded configuration into the running components.

        Engine parameters take effect on each engine's next analyze.
        """
        self.config = config

        for engine in self.engines.values():
            engine.update_config(config.engine)

        self.gate.update_settings(
            dry_run=config.trading.dry_run,
            min_trade_size=config.trading.min_trade_size,
            slippage_bps=config.trading.slippage_bps,
            history_capacity=config.trading.history_capacity,
        )

        self.pairs = list(config.trading.pairs)
        for pair in self.pairs:
            self.get_engine(pair)

        self.update_interval = config.trading.update_interval
        self.portfolio_value = config.trading.portfolio_value

        logger.info(f"Configuration applied: pairs={self.pairs}, interval={self.update_interval}s")

    def get_states(self) -> Dict[str, dict]:
        return {pair: engine.get_state().to_dict() for pair, engine in self.engines.items()}

    def get_status(self) -> dict:
        return {
            'running': self.is_running,
            'pairs': self.pairs,
            'update_interval': self.update_interval,
            'dry_run': self.gate.dry_run,
            'cycles_completed': self.cycles_completed,
            'cycles_failed': self.cycles_failed,
            'dropped_ticks': dict(self.dropped_ticks),
            'in_flight': sorted(self._in_flight),
        }
