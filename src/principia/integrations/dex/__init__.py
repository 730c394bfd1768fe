"""
DEX aggregator integrations (Jupiter on Solana).
"""

from principia.integrations.dex.aggregator_adapter import QuoteProvider, SwapQuote
from principia.integrations.dex.jupiter_adapter import JupiterAdapter

__all__ = ['QuoteProvider', 'SwapQuote', 'JupiterAdapter']
