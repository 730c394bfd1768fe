"""
Indicator Pipeline - turns a price feed into MarketObservations.

Per pair it keeps the last 100 prices and the last price seen, and on every
observe() computes SMA(20), normalized momentum, key levels and the signal
strength fed to the signal engine.

Only the pipeline writes its histories. Different pairs may be observed
concurrently; the same pair must not be (the trading loop guarantees this).
"""

import logging
import random
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Optional

from principia.analytics.indicators import (
    compute_momentum,
    compute_signal_strength,
    compute_sma,
    detect_key_levels,
)
from principia.decision.models import MarketObservation
from principia.market_data.price_feed import PriceFeed, SimulatedPriceFeed

logger = logging.getLogger(__name__)

# Stored prices per pair
HISTORY_LENGTH = 100

SMA_PERIOD = 20

# Placeholder observation volume: 1000 + U(0,1) * 500
BASE_VOLUME = 1000.0
VOLUME_VARIANCE = 500.0


class IndicatorPipeline:
    """
    Stateful market observer.

    Usage:
        pipeline = IndicatorPipeline(SimulatedPriceFeed(seed=7))
        observation = await pipeline.observe("SOL-USDC", portfolio_value=10.0)
    """

    def __init__(
        self,
        feed: Optional[PriceFeed] = None,
        rng: Optional[random.Random] = None,
        history_length: int = HISTORY_LENGTH
    ):
        """
        Args:
            feed: Price source (random walk when omitted)
            rng: Random source for the placeholder volume
            history_length: Prices kept per pair
        """
        self.feed = feed or SimulatedPriceFeed()
        self.rng = rng or random.Random()
        self.history_length = history_length

        self._history: Dict[str, Deque[float]] = {}
        self._last_prices: Dict[str, float] = {}

    async def observe(self, pair: str, portfolio_value: float = 0.0) -> MarketObservation:
        """
        Advance the pair's price and build an observation.

        Raises:
            NetworkError: Price fetch failed (history left untouched)
            ParseError: Price response was malformed (history left untouched)
        """
        price = await self.feed.next_price(pair, self._last_prices.get(pair))

        history = self._history.setdefault(pair, deque(maxlen=self.history_length))
        self._last_prices[pair] = price
        history.append(price)

        prices = list(history)
        momentum = compute_momentum(prices)
        sma20 = compute_sma(prices, SMA_PERIOD)
        key_levels = detect_key_levels(prices, price)

        signal_strength = 0.0
        if len(prices) >= SMA_PERIOD:
            signal_strength = compute_signal_strength(price, sma20)

        observation = MarketObservation(
            pair=pair,
            price=price,
            signal_strength=signal_strength,
            volume=BASE_VOLUME + self.rng.random() * VOLUME_VARIANCE,
            key_levels=tuple(key_levels),
            portfolio_value=portfolio_value,
            timestamp=datetime.utcnow(),
            momentum=momentum,
            sma20=sma20,
        )

        logger.debug(
            f"[{pair}] price={price:.4f} sma20={sma20:.4f} "
            f"signal={signal_strength:+.3f} levels={len(key_levels)}"
        )
        return observation

    def get_current_price(self, pair: str) -> float:
        """Last observed price, 0 when the pair has never been observed."""
        return self._last_prices.get(pair, 0.0)

    def get_price_history(self, pair: str, count: int = HISTORY_LENGTH) -> List[float]:
        """Up to `count` most recent prices, oldest first."""
        history = self._history.get(pair)
        if not history or count <= 0:
            return []
        return list(history)[-count:]

    def pairs(self) -> List[str]:
        return list(self._history)

    async def close(self) -> None:
        await self.feed.close()
