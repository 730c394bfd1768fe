"""
Price feeds for the indicator pipeline.

- SimulatedPriceFeed: bounded random walk, seedable for reproducible runs
- JupiterPriceFeed: base-token price from the Jupiter Price API
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Optional

from principia.config.settings import TokenConfig
from principia.integrations.dex.jupiter_adapter import JupiterAdapter

logger = logging.getLogger(__name__)

# First simulated price for a pair with no history
SIMULATED_START_PRICE = 100.0

# Maximum absolute step of the random walk per tick
SIMULATED_MAX_STEP = 1.0


class PriceFeed(ABC):
    """Source of the next price for a trading pair."""

    @abstractmethod
    async def next_price(self, pair: str, last_price: Optional[float]) -> float:
        """
        Return the next price for `pair`.

        Args:
            pair: BASE-QUOTE trading pair
            last_price: Previous price seen by the caller (None on first tick)

        Raises:
            NetworkError: When a remote source cannot be reached
            ParseError: When a remote source answers with garbage
        """
        pass

    async def close(self) -> None:
        return None


class SimulatedPriceFeed(PriceFeed):
    """
    Random walk: next = last + (U(0,1) - 0.5) * 2.

    Walks from 100 when the pair has no price yet. Prices stay strictly positive.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    async def next_price(self, pair: str, last_price: Optional[float]) -> float:
        last = last_price or SIMULATED_START_PRICE
        step = (self.rng.random() - 0.5) * 2 * SIMULATED_MAX_STEP
        price = last + step

        # A walk that would reach zero reflects instead
        if price <= 0:
            price = last - step
        return price


class JupiterPriceFeed(PriceFeed):
    """Reads the base token's price from Jupiter."""

    def __init__(self, adapter: JupiterAdapter, tokens: TokenConfig):
        self.adapter = adapter
        self.tokens = tokens

    async def next_price(self, pair: str, last_price: Optional[float]) -> float:
        base, _ = self.tokens.resolve_pair(pair)
        price = await self.adapter.fetch_price(base.mint)
        logger.debug(f"Fetched {pair} price from Jupiter: {price:.4f}")
        return price

    async def close(self) -> None:
        await self.adapter.close()
