"""
DEX Aggregator Adapter - Abstract Base Class and Quote Model.

This module defines the interface the execution gate uses to price swaps:
- SwapQuote: Quote in the aggregator's wire format (integer base units)
- QuoteProvider: Abstract base class for quote sources
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class SwapQuote:
    """
    Swap quote.

    Amounts are integers in the token's base units (lamports for SOL).
    """

    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    other_amount_threshold: int
    swap_mode: str = "ExactIn"
    slippage_bps: int = 50
    price_impact_pct: float = 0.0
    context_slot: int = 0
    time_taken: float = 0.0

    # True when produced locally instead of by the aggregator
    simulated: bool = False

    raw_data: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def price(self) -> float:
        """Output units per input unit."""
        if not self.in_amount:
            return 0.0
        return self.out_amount / self.in_amount


class QuoteProvider(ABC):
    """
    Abstract base class for quote providers.

    Implementations raise NetworkError for transport failures and
    ParseError for malformed responses.
    """

    @abstractmethod
    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int = 50
    ) -> SwapQuote:
        """
        Get a swap quote.

        Args:
            input_mint: Input token mint
            output_mint: Output token mint
            amount: Input amount in base units
            slippage_bps: Slippage tolerance in basis points (0.5% = 50)

        Returns:
            SwapQuote
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
