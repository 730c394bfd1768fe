"""
Technical Indicators - SMA, momentum, key levels.

Implements:
1. SMA (Simple Moving Average) - Basic trend indicator
2. Momentum - Normalized percentage change over the window
3. Key levels - Local extrema near the current price (support/resistance)
4. Signal strength - Price deviation from SMA, scaled to [-1, 1]
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from principia.decision.models import KeyLevel, LevelType

logger = logging.getLogger(__name__)

# Momentum is normalized against a 10% move
MOMENTUM_REFERENCE_CHANGE = 0.1

# Key levels are kept only within 10% of the current price
KEY_LEVEL_MAX_DISTANCE = 0.1

# Minimum history before key levels are detected
KEY_LEVEL_MIN_SAMPLES = 10

# Placeholder until real per-level volume is available from the market API
DEFAULT_LEVEL_VOLUME = 1000.0

# SMA deviation multiplier for signal strength
SIGNAL_DEVIATION_SCALE = 10.0


def compute_sma(prices: Sequence[float], period: int) -> Optional[float]:
    """
    Calculate Simple Moving Average (SMA).

    SMA Formula:
        SMA = sum of last N prices / N

    With fewer than `period` samples the mean of all samples is returned.

    Args:
        prices: Prices (most recent last)
        period: SMA period

    Returns:
        Current SMA value or None if there are no prices
    """
    if len(prices) == 0:
        return None

    window = min(period, len(prices))
    return float(np.mean(np.asarray(prices[-window:], dtype=float)))


def compute_momentum(prices: Sequence[float]) -> float:
    """
    Calculate normalized price momentum.

    Momentum = ((last - first) / first) / 10%, clamped to [-1, 1]

    Args:
        prices: Prices (most recent last)

    Returns:
        Momentum in [-1, 1], 0 with fewer than 2 samples
    """
    if len(prices) < 2:
        return 0.0

    first = prices[0]
    last = prices[-1]
    change = (last - first) / first

    return float(np.clip(change / MOMENTUM_REFERENCE_CHANGE, -1.0, 1.0))


def detect_key_levels(prices: Sequence[float], current_price: float) -> List[KeyLevel]:
    """
    Detect support and resistance levels.

    Interior points strictly above both neighbours are resistance, strictly
    below both neighbours are support. Only levels within 10% of the current
    price are kept. Every level carries a placeholder volume.

    Args:
        prices: Prices (most recent last)
        current_price: Current price

    Returns:
        Levels in the order they appear in the history; empty with fewer
        than 10 samples
    """
    if len(prices) < KEY_LEVEL_MIN_SAMPLES:
        return []

    arr = np.asarray(prices, dtype=float)
    prev, curr, nxt = arr[:-2], arr[1:-1], arr[2:]

    is_peak = (curr > prev) & (curr > nxt)
    is_trough = (curr < prev) & (curr < nxt)
    near = np.abs(curr - current_price) / current_price < KEY_LEVEL_MAX_DISTANCE

    levels = []
    for i in np.flatnonzero((is_peak | is_trough) & near):
        levels.append(KeyLevel(
            price=float(curr[i]),
            volume=DEFAULT_LEVEL_VOLUME,
            type=LevelType.RESISTANCE if is_peak[i] else LevelType.SUPPORT,
        ))

    return levels


def compute_signal_strength(current_price: float, sma: Optional[float]) -> float:
    """
    Signal from price deviation vs SMA.

    signal = clamp((price - sma) / sma * 10, -1, 1)

    Returns:
        Signal strength, 0 when no SMA is available
    """
    if not sma:
        return 0.0

    deviation = (current_price - sma) / sma
    return float(np.clip(deviation * SIGNAL_DEVIATION_SCALE, -1.0, 1.0))
