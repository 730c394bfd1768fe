"""
Jupiter Aggregator Adapter (Solana)

Integration with the Jupiter quote and price APIs:
- Swap quotes (GET /quote)
- Token prices (GET /price)
- Simulated responses on networks Jupiter does not serve

Jupiter only serves mainnet-beta. On devnet/testnet the adapter never
touches the network and answers with deterministic simulated data.
"""

import asyncio
import json
import logging
import math
import random
from typing import Any, Dict, Optional

import aiohttp

from principia.config.settings import PRIMARY_NETWORK
from principia.core.exceptions import NetworkError, ParseError
from principia.integrations.dex.aggregator_adapter import QuoteProvider, SwapQuote


# Price impact estimation factor: slippageBps / 500
# e.g., 50bps (0.5%) slippage -> 0.1% price impact
PRICE_IMPACT_FACTOR = 500

# Minimum output after slippage used by simulated quotes
SIMULATED_THRESHOLD_RATIO = 0.995

# Simulated prices are drawn from [100, 110)
SIMULATED_PRICE_BASE = 100.0
SIMULATED_PRICE_RANGE = 10.0


class JupiterAdapter(QuoteProvider):
    """
    Jupiter DEX aggregator adapter for Solana.

    Features:
    - Real-time swap quotes and token prices
    - Explicit request timeout
    - Rate limiting
    - Simulated responses off mainnet
    """

    def __init__(
        self,
        base_url: str = "https://quote-api.jup.ag/v6",
        price_url: str = "https://price.jup.ag/v4",
        network: str = PRIMARY_NETWORK,
        timeout_seconds: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize Jupiter adapter.

        Args:
            base_url: Quote API base URL
            price_url: Price API base URL
            network: Solana cluster name
            timeout_seconds: Total timeout per request
            session: Existing aiohttp session (created lazily otherwise)
            rng: Random source for simulated prices
        """
        self.base_url = base_url.rstrip('/')
        self.price_url = price_url.rstrip('/')
        self.network = network
        self.timeout_seconds = timeout_seconds
        self.session = session
        self._owns_session = session is None
        self.rng = rng or random.Random()

        # Rate limiting
        self.requests_per_second = 10
        self.last_request_time = 0.0

        self.logger = logging.getLogger(f"{__name__}.JupiterAdapter")
        self.logger.info(f"Jupiter adapter initialized (network={network})")

    @property
    def is_simulated(self) -> bool:
        return self.network != PRIMARY_NETWORK

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int = 50
    ) -> SwapQuote:
        """
        Get quote from Jupiter aggregator.

        Raises:
            NetworkError: Connection failure, timeout or non-200 status
            ParseError: Malformed response body
        """
        if self.is_simulated:
            self.logger.info(f"Jupiter API not available on {self.network}, using simulated quote")
            return self.simulate_quote(input_mint, output_mint, amount, slippage_bps)

        params = {
            'inputMint': input_mint,
            'outputMint': output_mint,
            'amount': str(int(amount)),
            'slippageBps': str(int(slippage_bps)),
        }

        data = await self._get_json(f"{self.base_url}/quote", params, what="quote")
        return self._parse_jupiter_quote(data, input_mint, output_mint)

    def simulate_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int = 50
    ) -> SwapQuote:
        """Deterministic quote: output reduced by the slippage tolerance."""
        out_amount = math.floor(amount * (1 - slippage_bps / 10000))

        return SwapQuote(
            input_mint=input_mint,
            output_mint=output_mint,
            in_amount=int(amount),
            out_amount=out_amount,
            other_amount_threshold=math.floor(out_amount * SIMULATED_THRESHOLD_RATIO),
            swap_mode="ExactIn",
            slippage_bps=slippage_bps,
            price_impact_pct=slippage_bps / PRICE_IMPACT_FACTOR,
            context_slot=0,
            time_taken=0.1,
            simulated=True,
        )

    async def fetch_price(self, mint: str) -> float:
        """
        Fetch the USD price of a token from the Jupiter Price API.

        Raises:
            NetworkError: Connection failure, timeout or non-200 status
            ParseError: Malformed response or token missing from response
        """
        if self.is_simulated:
            self.logger.debug(f"Jupiter Price API not available on {self.network}, using simulated price")
            return SIMULATED_PRICE_BASE + self.rng.random() * SIMULATED_PRICE_RANGE

        data = await self._get_json(f"{self.price_url}/price", {'ids': mint}, what="price")

        try:
            return float(data['data'][mint]['price'])
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Failed to parse price data: missing price for {mint}") from e

    def _parse_jupiter_quote(
        self,
        data: Dict[str, Any],
        input_mint: str,
        output_mint: str
    ) -> SwapQuote:
        """Parse Jupiter API response into SwapQuote."""
        try:
            return SwapQuote(
                input_mint=data.get('inputMint', input_mint),
                output_mint=data.get('outputMint', output_mint),
                in_amount=int(data['inAmount']),
                out_amount=int(data['outAmount']),
                other_amount_threshold=int(data.get('otherAmountThreshold', data['outAmount'])),
                swap_mode=data.get('swapMode', 'ExactIn'),
                slippage_bps=int(data.get('slippageBps', 50)),
                price_impact_pct=float(data.get('priceImpactPct', 0)),
                context_slot=int(data.get('contextSlot', 0)),
                time_taken=float(data.get('timeTaken', 0)),
                raw_data=data,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Failed to parse quote: {e}") from e

    async def _get_json(self, url: str, params: Dict[str, str], what: str) -> Dict[str, Any]:
        """GET a JSON document, mapping transport and decode failures to our errors."""
        await self._rate_limit()

        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with self.session.get(url, params=params, timeout=timeout) as response:
                body = await response.text()
                if response.status != 200:
                    raise NetworkError(
                        f"Failed to fetch {what}: HTTP {response.status} - {body[:200]}",
                        status=response.status,
                    )
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Failed to fetch {what}: timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Failed to fetch {what}: {e}") from e

        try:
            data = json.loads(body)
        except ValueError as e:
            raise ParseError(f"Failed to parse {what} data: {e}") from e

        if not isinstance(data, dict):
            raise ParseError(f"Failed to parse {what} data: expected a JSON object")

        return data

    async def _rate_limit(self):
        """Implement rate limiting."""
        loop = asyncio.get_running_loop()
        time_since_last = loop.time() - self.last_request_time
        min_interval = 1.0 / self.requests_per_second

        if time_since_last < min_interval:
            await asyncio.sleep(min_interval - time_since_last)

        self.last_request_time = loop.time()

    async def close(self):
        """Cleanup resources."""
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

        self.logger.info("Jupiter adapter cleanup completed")
