"""
Decision data models.

MarketObservation flows from the indicator pipeline into the signal engine;
EngineState is the engine's memory between cycles; Decision is what one
analyze() call returns. All of them are frozen: a new instance is produced
for every change.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from numbers import Real
from typing import Any, Dict, Mapping, Optional, Tuple

from principia.core.exceptions import ValidationError


class LevelType(str, Enum):
    """Key level classification."""
    SUPPORT = "support"
    RESISTANCE = "resistance"


class PositionState(str, Enum):
    """Engine position states."""
    LONG = "long"
    SHORT = "short"
    NEUTRAL = "neutral"


class Action(str, Enum):
    """Decision action."""
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass(frozen=True)
class KeyLevel:
    """Support/resistance level near the current price."""
    price: float
    volume: float
    type: LevelType = LevelType.SUPPORT


@dataclass(frozen=True)
class MarketObservation:
    """
    One market sample fed to the signal engine.

    signal_strength is nominally in [-1, 1] but is not clamped here;
    oversized inputs are only tamed by the position-size clamp.
    """
    pair: str
    price: float
    signal_strength: float
    volume: float = 0.0
    key_levels: Tuple[KeyLevel, ...] = ()
    portfolio_value: float = 0.0
    timestamp: datetime = field(default_factory=datetime.utcnow)

    # Pipeline diagnostics, not used by the engine
    momentum: float = 0.0
    sma20: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MarketObservation":
        """
        Build an observation from a plain mapping (camelCase or snake_case keys).

        Raises:
            ValidationError: If price or signal strength is missing
        """
        values = {_OBSERVATION_KEYS.get(key, key): value for key, value in data.items()}

        for required in ('price', 'signal_strength'):
            if values.get(required) is None:
                raise ValidationError(f"Observation is missing required field '{required}'")

        levels = []
        for level in values.get('key_levels') or ():
            if isinstance(level, KeyLevel):
                levels.append(level)
                continue
            try:
                levels.append(KeyLevel(
                    price=level['price'],
                    volume=level.get('volume', 0.0),
                    type=LevelType(level.get('type', LevelType.SUPPORT.value)),
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(f"Malformed key level {level!r}: {e}") from e

        observation = cls(
            pair=values.get('pair', 'UNKNOWN'),
            price=values['price'],
            signal_strength=values['signal_strength'],
            volume=values.get('volume', 0.0),
            key_levels=tuple(levels),
            portfolio_value=values.get('portfolio_value', 0.0),
            timestamp=values.get('timestamp') or datetime.utcnow(),
            momentum=values.get('momentum', 0.0),
            sma20=values.get('sma20'),
        )
        observation.validate()
        return observation

    def validate(self) -> None:
        """
        Check the fields the engine depends on.

        Raises:
            ValidationError: If any numeric field is missing, non-finite or out of range
        """
        if not _is_number(self.price):
            raise ValidationError(f"Observation for {self.pair} has no numeric price: {self.price!r}")
        if not math.isfinite(self.price) or self.price <= 0:
            raise ValidationError(f"Observation for {self.pair} has invalid price: {self.price}")
        if not _is_number(self.signal_strength) or not math.isfinite(self.signal_strength):
            raise ValidationError(
                f"Observation for {self.pair} has invalid signal strength: {self.signal_strength!r}"
            )
        if (not _is_number(self.portfolio_value) or not math.isfinite(self.portfolio_value)
                or self.portfolio_value < 0):
            raise ValidationError(
                f"Observation for {self.pair} has invalid portfolio value: {self.portfolio_value!r}"
            )
        for level in self.key_levels:
            if not _is_number(level.price) or not _is_number(level.volume):
                raise ValidationError(f"Observation for {self.pair} has malformed key level: {level!r}")
            if not math.isfinite(level.price) or level.price <= 0:
                raise ValidationError(f"Observation for {self.pair} has invalid key level price: {level!r}")
            if not math.isfinite(level.volume) or level.volume < 0:
                raise ValidationError(f"Observation for {self.pair} has invalid key level volume: {level!r}")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


_OBSERVATION_KEYS = {
    'signalStrength': 'signal_strength',
    'keyLevels': 'key_levels',
    'portfolioValue': 'portfolio_value',
}


@dataclass(frozen=True)
class LastAction:
    """Most recent non-hold action taken by the engine."""
    action: Action
    timestamp: datetime
    price: float


@dataclass(frozen=True)
class EngineState:
    """
    Signal engine memory for one trading pair.

    price_history holds at most momentum_period prices, oldest first.
    """
    position: PositionState = PositionState.NEUTRAL
    position_size: float = 0.0
    momentum: float = 0.0
    price_history: Tuple[float, ...] = ()
    last_action: Optional[LastAction] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'position': self.position.value,
            'position_size': self.position_size,
            'momentum': self.momentum,
            'price_history': list(self.price_history),
            'last_action': {
                'action': self.last_action.action.value,
                'timestamp': self.last_action.timestamp.isoformat(),
                'price': self.last_action.price,
            } if self.last_action else None,
        }


@dataclass(frozen=True)
class RiskManagement:
    """Protective parameters that accompany a position (Law III)."""
    stop_loss: float
    take_profit: float
    hedge_size: float


@dataclass(frozen=True)
class Decision:
    """Output of one analyze() call."""
    action: Action
    position: PositionState
    position_size: float
    position_change: float
    force: float
    acceleration: float
    momentum: float
    gravitational_force: float
    reason: str
    risk_management: Optional[RiskManagement] = None
    inertia_threshold: Optional[float] = None
    principia: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_trade(self) -> bool:
        return self.action != Action.HOLD

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'action': self.action.value,
            'position': self.position.value,
            'position_size': self.position_size,
            'position_change': self.position_change,
            'force': self.force,
            'acceleration': self.acceleration,
            'momentum': self.momentum,
            'gravitational_force': self.gravitational_force,
            'reason': self.reason,
        }
        if self.risk_management is not None:
            data['risk_management'] = {
                'stop_loss': self.risk_management.stop_loss,
                'take_profit': self.risk_management.take_profit,
                'hedge_size': self.risk_management.hedge_size,
            }
        if self.inertia_threshold is not None:
            data['inertia_threshold'] = self.inertia_threshold
        return data
