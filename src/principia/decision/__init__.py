"""
Decision module: Principia signal engine and its data models.
"""

from principia.decision.engine import SignalEngine, analyze_market
from principia.decision.models import (
    Action,
    Decision,
    EngineState,
    KeyLevel,
    LastAction,
    LevelType,
    MarketObservation,
    PositionState,
    RiskManagement,
)

__all__ = [
    'SignalEngine',
    'analyze_market',
    'Action',
    'Decision',
    'EngineState',
    'KeyLevel',
    'LastAction',
    'LevelType',
    'MarketObservation',
    'PositionState',
    'RiskManagement',
]
