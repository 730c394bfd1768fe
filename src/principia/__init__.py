"""
Principia trading bot.

Newtonian signal engine for Solana token pairs, priced through Jupiter.
"""

__version__ = "0.1.0"
