"""
Shared utilities.
"""

from principia.utils.logger import (
    JSONFormatter,
    PerformanceLogger,
    TradingLogger,
    setup_logging,
    get_trading_logger,
    get_performance_logger,
)

__all__ = [
    'JSONFormatter',
    'PerformanceLogger',
    'TradingLogger',
    'setup_logging',
    'get_trading_logger',
    'get_performance_logger',
]
