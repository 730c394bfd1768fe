"""
Execution Gate - turns decisions into audited trade attempts.

Pipeline for every buy/sell:
1. amount = portfolio_value * size_fraction, a quantity of the pair's base
   token on both sides (the engine's position unit)
2. Reject below min_trade_size, before any quote is requested
3. Resolve pair -> mints. A sell spends `amount` base tokens; a buy spends
   amount * price quote tokens. Both converted to integer base units
4. Quote from the provider (Jupiter, or its simulated answer off mainnet)
5. Dry run: record a simulated fill from the quote
   Live: rejected, on-chain submission is not available

Routine outcomes are returned as ExecutionResult values, never raised.
"""

import logging
import math
from collections import deque
from typing import Deque, List, Optional

from principia.config.settings import TokenConfig
from principia.core.exceptions import NetworkError, ParseError, ValidationError
from principia.decision.models import Action, Decision
from principia.execution.models import (
    ExecutionResult,
    TradeRecord,
    TradeSide,
    TradeStatistics,
)
from principia.integrations.dex.aggregator_adapter import QuoteProvider
from principia.utils.logger import get_trading_logger

logger = logging.getLogger(__name__)

REASON_BELOW_MINIMUM = "Trade size below minimum"
REASON_NOT_IMPLEMENTED = "Real trade execution not implemented"


class ExecutionGate:
    """
    Safety gate in front of the quote provider.

    Features:
    - Minimum trade size check
    - Dry-run simulation (default)
    - Bounded trade history with statistics recomputed on demand
    """

    def __init__(
        self,
        quote_provider: QuoteProvider,
        tokens: Optional[TokenConfig] = None,
        dry_run: bool = True,
        min_trade_size: float = 0.01,
        slippage_bps: int = 50,
        history_capacity: int = 1000
    ):
        """
        Initialize execution gate.

        Args:
            quote_provider: Source of swap quotes
            tokens: Token registry used to resolve pairs
            dry_run: Simulate instead of submitting transactions
            min_trade_size: Minimum amount in base-token units
            slippage_bps: Slippage tolerance sent with every quote request
            history_capacity: Trade records kept (oldest evicted first)
        """
        self.quote_provider = quote_provider
        self.tokens = tokens or TokenConfig()
        self.dry_run = dry_run
        self.min_trade_size = min_trade_size
        self.slippage_bps = slippage_bps

        self._history: Deque[TradeRecord] = deque(maxlen=history_capacity)
        self.trading_logger = get_trading_logger(f"{__name__}.ExecutionGate")

        logger.info(
            f"ExecutionGate initialized: dry_run={dry_run}, "
            f"min_trade_size={min_trade_size}, slippage={slippage_bps}bps"
        )

    @property
    def history_capacity(self) -> int:
        return self._history.maxlen

    async def execute_buy(
        self,
        pair: str,
        size_fraction: float,
        portfolio_value: float,
        price: Optional[float] = None
    ) -> ExecutionResult:
        """
        Buy portfolio_value * size_fraction base tokens of `pair` with its quote token.

        Raises:
            ValidationError: If the trade passes the minimum but `price` is missing
        """
        return await self._execute(pair, TradeSide.BUY, size_fraction, portfolio_value, price)

    async def execute_sell(
        self,
        pair: str,
        size_fraction: float,
        portfolio_value: float,
        price: Optional[float] = None
    ) -> ExecutionResult:
        """Sell portfolio_value * size_fraction base tokens of `pair` for its quote token."""
        return await self._execute(pair, TradeSide.SELL, size_fraction, portfolio_value, price)

    async def execute_decision(
        self,
        pair: str,
        decision: Decision,
        portfolio_value: float,
        price: float
    ) -> ExecutionResult:
        """
        Execute a signal engine decision at the observed price.

        The size fraction is |position_change| / portfolio_value, so buy and
        sell both move |position_change| base tokens.
        """
        if decision.action == Action.HOLD:
            return ExecutionResult.rejected("Hold decision, nothing to execute")

        size_fraction = abs(decision.position_change) / portfolio_value if portfolio_value else 0.0

        if decision.action == Action.BUY:
            return await self.execute_buy(pair, size_fraction, portfolio_value, price)
        return await self.execute_sell(pair, size_fraction, portfolio_value, price)

    def _reject_below_minimum(self, pair: str, side: TradeSide, amount: float) -> ExecutionResult:
        self.trading_logger.trade_event(
            pair, side.value, False, self.dry_run,
            reason=REASON_BELOW_MINIMUM, amount=amount, min_trade_size=self.min_trade_size,
        )
        return ExecutionResult.rejected(REASON_BELOW_MINIMUM)

    async def _execute(
        self,
        pair: str,
        side: TradeSide,
        size_fraction: float,
        portfolio_value: float,
        price: Optional[float]
    ) -> ExecutionResult:
        amount = portfolio_value * size_fraction
        dry_run = self.dry_run

        if amount < self.min_trade_size:
            return self._reject_below_minimum(pair, side, amount)

        # Raises UnknownTokenError for unconfigured symbols
        base, quote = self.tokens.resolve_pair(pair)
        base_amount = math.floor(amount * 10 ** base.decimals)

        if side == TradeSide.BUY:
            if price is None or not math.isfinite(price) or price <= 0:
                raise ValidationError(f"Buy on {pair} needs a positive price to size the spend, got {price!r}")
            input_token, output_token = quote, base
            in_amount = math.floor(amount * price * 10 ** quote.decimals)
        else:
            input_token, output_token = base, quote
            in_amount = base_amount

        # Rounds to nothing in whole token units
        if base_amount < 1 or in_amount < 1:
            return self._reject_below_minimum(pair, side, amount)

        try:
            swap_quote = await self.quote_provider.get_quote(
                input_token.mint,
                output_token.mint,
                in_amount,
                slippage_bps=self.slippage_bps,
            )
        except (NetworkError, ParseError) as e:
            record = TradeRecord(
                success=False,
                dry_run=dry_run,
                input_mint=input_token.mint,
                output_mint=output_token.mint,
                input_amount=in_amount,
                base_amount=base_amount,
                reason=f"Failed to get quote: {e}",
                pair=pair,
                side=side,
            )
            self._history.append(record)
            self.trading_logger.trade_event(pair, side.value, False, dry_run, reason=record.reason)
            return ExecutionResult.failed(e, record)

        if dry_run:
            record = TradeRecord(
                success=True,
                dry_run=True,
                input_mint=input_token.mint,
                output_mint=output_token.mint,
                input_amount=in_amount,
                base_amount=base_amount,
                output_amount=swap_quote.out_amount,
                price_impact=swap_quote.price_impact_pct,
                pair=pair,
                side=side,
            )
            self._history.append(record)
            self.trading_logger.trade_event(
                pair, side.value, True, True,
                input_amount=in_amount,
                base_amount=base_amount,
                output_amount=swap_quote.out_amount,
                price_impact=swap_quote.price_impact_pct,
            )
            return ExecutionResult.ok(record)

        # Live submission is not available; never report success
        record = TradeRecord(
            success=False,
            dry_run=False,
            input_mint=input_token.mint,
            output_mint=output_token.mint,
            input_amount=in_amount,
            base_amount=base_amount,
            output_amount=swap_quote.out_amount,
            price_impact=swap_quote.price_impact_pct,
            reason=REASON_NOT_IMPLEMENTED,
            pair=pair,
            side=side,
        )
        self._history.append(record)
        self.trading_logger.trade_event(pair, side.value, False, False, reason=REASON_NOT_IMPLEMENTED)
        return ExecutionResult.rejected(REASON_NOT_IMPLEMENTED, record)

    def get_statistics(self) -> TradeStatistics:
        """Recompute statistics from the current history."""
        total = len(self._history)
        successful = sum(1 for t in self._history if t.success)
        dry_runs = sum(1 for t in self._history if t.dry_run)

        return TradeStatistics(
            total_trades=total,
            successful_trades=successful,
            dry_run_trades=dry_runs,
            success_rate=round(successful / total * 100, 2) if total > 0 else 0.0,
        )

    def get_trade_history(self, count: int = 10) -> List[TradeRecord]:
        """Most recent `count` records, oldest first."""
        if count <= 0:
            return []
        return list(self._history)[-count:]

    def set_dry_run(self, enabled: bool) -> None:
        """Toggle dry run; applies to the next execution only."""
        self.dry_run = enabled
        if enabled:
            logger.info("DRY RUN MODE ENABLED")
        else:
            logger.warning("LIVE TRADING MODE ENABLED")

    def clear_history(self) -> None:
        self._history.clear()

    def update_settings(
        self,
        dry_run: Optional[bool] = None,
        min_trade_size: Optional[float] = None,
        slippage_bps: Optional[int] = None,
        history_capacity: Optional[int] = None
    ) -> None:
        """Apply reloaded trading settings. None leaves a setting unchanged."""
        if dry_run is not None and dry_run != self.dry_run:
            self.set_dry_run(dry_run)
        if min_trade_size is not None:
            self.min_trade_size = min_trade_size
        if slippage_bps is not None:
            self.slippage_bps = slippage_bps
        if history_capacity is not None and history_capacity != self._history.maxlen:
            self._history = deque(self._history, maxlen=history_capacity)
