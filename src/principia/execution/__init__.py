"""
Execution: safety gate, trade records and statistics.
"""

from principia.execution.gate import ExecutionGate
from principia.execution.models import (
    ExecutionResult,
    ExecutionResultStatus,
    TradeRecord,
    TradeSide,
    TradeStatistics,
)

__all__ = [
    'ExecutionGate',
    'ExecutionResult',
    'ExecutionResultStatus',
    'TradeRecord',
    'TradeSide',
    'TradeStatistics',
]
