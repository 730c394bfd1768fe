"""Trading loop: per-pair scheduling of observe, analyze and execute."""

from principia.trading_engine.loop import CycleReport, TradingLoop

__all__ = ['CycleReport', 'TradingLoop']
