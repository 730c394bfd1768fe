"""
Signal Engine - Principia decision core.

Turns a MarketObservation into a buy/sell/hold Decision using Newton's laws
as a trading model:

1. Law of Inertia: keep the current position unless the combined force
   exceeds the inertia threshold (prevents overtrading and whipsaw)
2. Law of Acceleration: position change = force / trading mass
3. Law of Action-Reaction: every position carries proportional
   stop-loss, take-profit and hedge sizes
4. Universal Gravitation: price is attracted to nearby key levels with
   force G * volume / distance^2
5. Conservation of Momentum: trend over the momentum window

Design Pattern: Pure function + thin stateful wrapper
- analyze_market(observation, state, config) -> (decision, state') does all the work
- SignalEngine owns the EngineState of exactly one trading pair
"""

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from principia.config.settings import EngineConfig, resolve_config
from principia.decision.models import (
    Action,
    Decision,
    EngineState,
    KeyLevel,
    LastAction,
    MarketObservation,
    PositionState,
    RiskManagement,
)
from principia.utils.logger import get_trading_logger

logger = logging.getLogger(__name__)

# Force composition weights (signal, momentum, gravitation)
SIGNAL_WEIGHT = 0.6
MOMENTUM_WEIGHT = 0.2
GRAVITY_WEIGHT = 0.2

# Minimum position change that counts as a trade
POSITION_DEAD_BAND = 0.01

# Law III multipliers
STOP_LOSS_FACTOR = 0.5
TAKE_PROFIT_FACTOR = 1.5
HEDGE_FACTOR = 0.2


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def overcomes_inertia(force: float, config: EngineConfig) -> bool:
    """Law I: is the force strong enough to change state?"""
    return abs(force) >= config.inertia_threshold


def calculate_acceleration(force: float, config: EngineConfig) -> float:
    """Law II: a = F / m."""
    return force / config.trading_mass


def calculate_reaction(position_size: float, config: EngineConfig) -> RiskManagement:
    """
    Law III: risk management proportional to the position.

    take_profit / stop_loss is always 3 for the same ratio.
    """
    scaled = position_size * config.risk_reaction_ratio
    return RiskManagement(
        stop_loss=scaled * STOP_LOSS_FACTOR,
        take_profit=scaled * TAKE_PROFIT_FACTOR,
        hedge_size=scaled * HEDGE_FACTOR,
    )


def calculate_gravitational_force(
    current_price: float,
    key_levels: Iterable[KeyLevel],
    config: EngineConfig
) -> float:
    """
    Net attraction of the current price to key levels, clamped to [-1, 1].

    Levels above the price pull upward (positive), levels below pull
    downward (negative). Levels at zero distance are skipped.
    """
    total_force = 0.0

    for level in key_levels:
        distance = abs(current_price - level.price)
        if distance == 0:
            continue

        force = config.gravitational_constant * (level.volume / distance ** 2)
        direction = 1 if level.price > current_price else -1
        total_force += force * direction

    return _clamp(total_force, -1.0, 1.0)


def update_momentum(
    price: float,
    price_history: Tuple[float, ...],
    config: EngineConfig
) -> Tuple[float, Tuple[float, ...]]:
    """
    Push price into the momentum window and compute momentum = mass * velocity.

    Returns:
        (momentum, new window). Momentum is 0 with fewer than 2 points.
    """
    window = (price_history + (price,))[-config.momentum_period:]

    if len(window) < 2:
        return 0.0, window

    oldest = window[0]
    velocity = (price - oldest) / oldest
    return config.trading_mass * velocity, window


def analyze_market(
    observation: MarketObservation,
    state: EngineState,
    config: EngineConfig,
    now: Optional[datetime] = None
) -> Tuple[Decision, EngineState]:
    """
    Run one decision cycle.

    Pure with respect to its arguments: the input state is never modified,
    the returned state is a new value (or the same object when the inertia
    gate refuses the transition).

    Args:
        observation: Market sample for one pair
        state: Current engine state for that pair
        config: Resolved engine configuration
        now: Timestamp recorded in last_action (defaults to utcnow)

    Returns:
        (decision, new_state)

    Raises:
        ValidationError: If the observation is malformed (before any work)
    """
    observation.validate()

    price = observation.price
    momentum, window = update_momentum(price, state.price_history, config)
    gravitational_force = calculate_gravitational_force(price, observation.key_levels, config)

    combined_force = (
        observation.signal_strength * SIGNAL_WEIGHT
        + momentum * MOMENTUM_WEIGHT
        + gravitational_force * GRAVITY_WEIGHT
    )

    # Law I: transition refused, state untouched
    if not overcomes_inertia(combined_force, config):
        decision = Decision(
            action=Action.HOLD,
            position=state.position,
            position_size=state.position_size,
            position_change=0.0,
            force=combined_force,
            acceleration=0.0,
            momentum=momentum,
            gravitational_force=gravitational_force,
            reason=(
                f"Insufficient force ({combined_force:.3f}) to overcome inertia "
                f"threshold {config.inertia_threshold} (Law I)"
            ),
            inertia_threshold=config.inertia_threshold,
        )
        return decision, state

    # Law II
    acceleration = calculate_acceleration(combined_force, config)
    max_size = observation.portfolio_value * config.max_position_size
    new_size = _clamp(state.position_size + acceleration, -max_size, max_size)

    action = Action.HOLD
    new_position = state.position

    if new_size > state.position_size + POSITION_DEAD_BAND:
        action = Action.BUY
        new_position = PositionState.LONG
    elif new_size < state.position_size - POSITION_DEAD_BAND:
        action = Action.SELL
        if new_size < 0:
            new_position = PositionState.SHORT
        elif new_size == 0:
            new_position = PositionState.NEUTRAL
        else:
            new_position = PositionState.LONG

    # Law III, computed whenever the gate passes
    risk_management = calculate_reaction(abs(new_size), config)
    position_change = new_size - state.position_size

    last_action = state.last_action
    if action != Action.HOLD:
        last_action = LastAction(action=action, timestamp=now or datetime.utcnow(), price=price)

    # Within the dead band the clamped size is still committed
    new_state = EngineState(
        position=new_position,
        position_size=new_size,
        momentum=momentum,
        price_history=window,
        last_action=last_action,
    )

    decision = Decision(
        action=action,
        position=new_position,
        position_size=new_size,
        position_change=position_change,
        force=combined_force,
        acceleration=acceleration,
        momentum=momentum,
        gravitational_force=gravitational_force,
        risk_management=risk_management,
        reason=(
            f"Force ({combined_force:.3f}) overcame inertia. "
            f"Acceleration: {acceleration:.3f} (Law II)"
        ),
        principia={
            'law_i': {'overcame_inertia': True, 'threshold': config.inertia_threshold},
            'law_ii': {'acceleration': acceleration, 'force': combined_force, 'mass': config.trading_mass},
            'law_iii': risk_management,
            'gravitation': gravitational_force,
            'momentum': momentum,
        },
    )
    return decision, new_state


class SignalEngine:
    """
    Principia signal engine for a single trading pair.

    Owns one EngineState; never share an instance across pairs. analyze()
    performs no I/O. evaluate() computes without committing, so a caller
    can drop the new state when the rest of its cycle fails.
    """

    def __init__(
        self,
        config: Union[EngineConfig, Mapping[str, Any], None] = None,
        pair: str = "UNKNOWN"
    ):
        """
        Initialize signal engine.

        Args:
            config: EngineConfig or partial mapping (resolved once here)
            pair: Trading pair this engine is bound to (for logging)
        """
        self.config = config if isinstance(config, EngineConfig) else resolve_config(config)
        self.pair = pair
        self._state = EngineState()
        self.trading_logger = get_trading_logger(f"{__name__}.{pair}")

        logger.info(
            f"SignalEngine initialized for {pair}: "
            f"inertia={self.config.inertia_threshold}, mass={self.config.trading_mass}, "
            f"max_position={self.config.max_position_size:.0%}"
        )

    def evaluate(
        self,
        observation: Union[MarketObservation, Mapping[str, Any]]
    ) -> Tuple[Decision, EngineState]:
        """
        Compute the decision and the would-be next state without committing it.

        Raises:
            ValidationError: If the observation is malformed
        """
        if not isinstance(observation, MarketObservation):
            observation = MarketObservation.from_dict(observation)
        return analyze_market(observation, self._state, self.config)

    def commit(self, state: EngineState) -> None:
        """Replace the engine state with the result of evaluate()."""
        self._state = state

    def analyze(self, observation: Union[MarketObservation, Mapping[str, Any]]) -> Decision:
        """
        Evaluate an observation and commit the resulting state.

        Args:
            observation: MarketObservation or mapping with at least price/signalStrength

        Returns:
            Decision for this cycle

        Raises:
            ValidationError: If the observation is malformed (state unchanged)
        """
        decision, new_state = self.evaluate(observation)
        self.commit(new_state)
        self.log_decision(decision)
        return decision

    def log_decision(self, decision: Decision) -> None:
        if decision.is_trade:
            self.trading_logger.decision_event(
                self.pair,
                decision.action.value,
                decision.force,
                position=decision.position.value,
                position_size=decision.position_size,
            )
        else:
            logger.debug(f"[{self.pair}] HOLD: {decision.reason}")

    def get_state(self) -> EngineState:
        """Return a snapshot of the current state (immutable value)."""
        return self._state

    def reset(self) -> None:
        """Return to neutral with zero size and an empty momentum window."""
        self._state = EngineState()
        logger.info(f"SignalEngine for {self.pair} reset to neutral")

    def update_config(self, partial: Union[EngineConfig, Mapping[str, Any]]) -> None:
        """
        Merge new parameters into the config; effective on the next analyze().

        Raises:
            ConfigurationError: If the merged config is invalid (old config kept)
        """
        if isinstance(partial, EngineConfig):
            partial = partial.model_dump()
        self.config = resolve_config(partial, base=self.config)
        logger.info(f"SignalEngine for {self.pair} config updated: {self.config.model_dump()}")

    def get_stats(self) -> dict:
        """Engine configuration and state summary."""
        return {
            'pair': self.pair,
            'config': self.config.model_dump(),
            'state': self._state.to_dict(),
        }
