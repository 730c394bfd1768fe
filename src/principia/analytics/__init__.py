"""
Analytics - technical indicators feeding the signal engine.
"""

from principia.analytics.indicators import (
    compute_sma,
    compute_momentum,
    detect_key_levels,
    compute_signal_strength,
)

__all__ = [
    'compute_sma',
    'compute_momentum',
    'detect_key_levels',
    'compute_signal_strength',
]
