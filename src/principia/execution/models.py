"""
Execution data models.

Every ExecutionGate call returns an ExecutionResult:
- OK: trade simulated (dry run) or executed, `record` set
- REJECTED: routine refusal (below minimum, live path unavailable), `reason` set
- FAILED: quote could not be obtained, `error` and `reason` set
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class TradeSide(str, Enum):
    """Trade direction."""
    BUY = "buy"
    SELL = "sell"


class ExecutionResultStatus(str, Enum):
    """Execution result status."""
    OK = "ok"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class TradeRecord:
    """
    Audited trade attempt.

    Amounts are integers in the input/output token's base units.
    base_amount is the base-token quantity moved, whichever side is spent.
    """
    success: bool
    dry_run: bool
    input_mint: str
    output_mint: str
    input_amount: int
    output_amount: int = 0
    base_amount: int = 0
    price_impact: float = 0.0
    timestamp: datetime = field(default_factory=datetime.utcnow)
    reason: Optional[str] = None
    pair: Optional[str] = None
    side: Optional[TradeSide] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'dry_run': self.dry_run,
            'input_mint': self.input_mint,
            'output_mint': self.output_mint,
            'input_amount': self.input_amount,
            'output_amount': self.output_amount,
            'base_amount': self.base_amount,
            'price_impact': self.price_impact,
            'timestamp': self.timestamp.isoformat(),
            'reason': self.reason,
            'pair': self.pair,
            'side': self.side.value if self.side else None,
        }


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one execution request."""
    status: ExecutionResultStatus
    record: Optional[TradeRecord] = None
    reason: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.status == ExecutionResultStatus.OK

    @property
    def is_rejected(self) -> bool:
        return self.status == ExecutionResultStatus.REJECTED

    @property
    def is_failure(self) -> bool:
        return self.status == ExecutionResultStatus.FAILED

    @classmethod
    def ok(cls, record: TradeRecord) -> "ExecutionResult":
        return cls(status=ExecutionResultStatus.OK, record=record)

    @classmethod
    def rejected(cls, reason: str, record: Optional[TradeRecord] = None) -> "ExecutionResult":
        return cls(status=ExecutionResultStatus.REJECTED, record=record, reason=reason)

    @classmethod
    def failed(cls, error: Exception, record: Optional[TradeRecord] = None) -> "ExecutionResult":
        return cls(status=ExecutionResultStatus.FAILED, record=record, reason=str(error), error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Flat {success, reason, ...record} view, as reported by the status API."""
        data = self.record.to_dict() if self.record else {}
        data['status'] = self.status.value
        data['success'] = self.success
        if self.reason is not None:
            data['reason'] = self.reason
        return data


@dataclass(frozen=True)
class TradeStatistics:
    """Summary recomputed from the trade history."""
    total_trades: int = 0
    successful_trades: int = 0
    dry_run_trades: int = 0
    success_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_trades': self.total_trades,
            'successful_trades': self.successful_trades,
            'dry_run_trades': self.dry_run_trades,
            'success_rate': self.success_rate,
        }
