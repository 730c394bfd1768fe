"""
Configuration models using Pydantic for type-safe validation.

This module defines all configuration models for the bot:
- EngineConfig: Principia signal engine parameters
- TradingConfig: Execution gate and scheduler settings
- MarketDataConfig: Network, price feed and Jupiter endpoints
- TokenConfig: Token symbol -> mint/decimals registry
- SystemConfig: Log level, log format, status API
- AppConfig: Everything above

Keys may be given in camelCase (as in JSON-style config files)
or snake_case.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel, to_snake
from solders.pubkey import Pubkey

from principia.core.exceptions import ConfigurationError, UnknownTokenError


SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

PRIMARY_NETWORK = "mainnet-beta"


class LogLevel(str, Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


# ============================================================================
# Engine Configuration
# ============================================================================

class EngineConfig(BaseModel):
    """
    Signal engine parameters.

    Resolved once (see resolve_config) and never mutated afterwards;
    update_config on the engine swaps in a new instance.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    inertia_threshold: float = Field(
        default=0.15,
        ge=0.0,
        description="Minimum |combined force| required to change position"
    )

    trading_mass: float = Field(
        default=1.0,
        gt=0.0,
        description="Resistance to position change (a = F / m)"
    )

    risk_reaction_ratio: float = Field(
        default=1.0,
        gt=0.0,
        description="Scales stop-loss, take-profit and hedge sizes"
    )

    gravitational_constant: float = Field(
        default=0.001,
        ge=0.0,
        description="Strength of attraction to key levels"
    )

    momentum_period: int = Field(
        default=20,
        ge=1,
        description="Price window length used for momentum"
    )

    max_position_size: float = Field(
        default=0.3,
        gt=0.0,
        le=1.0,
        description="Maximum position size as fraction of portfolio"
    )


def resolve_config(
    partial: Optional[Mapping[str, Any]] = None,
    base: Optional[EngineConfig] = None
) -> EngineConfig:
    """
    Merge a partial engine configuration over a base and validate it.

    Args:
        partial: Overrides, camelCase or snake_case keys. None values are ignored.
        base: Configuration to merge over (defaults when omitted)

    Returns:
        Fully populated, immutable EngineConfig

    Raises:
        ConfigurationError: If a key is unknown or a value is out of range
    """
    data: Dict[str, Any] = base.model_dump() if base is not None else {}

    for key, value in (partial or {}).items():
        if value is None:
            continue
        data[to_snake(key)] = value

    try:
        return EngineConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid engine configuration: {e}") from e


# ============================================================================
# Trading Configuration
# ============================================================================

class TradingConfig(_ConfigModel):
    """Execution gate and scheduler settings."""

    dry_run: bool = Field(
        default=True,
        description="Simulate trades instead of submitting transactions"
    )

    min_trade_size: float = Field(
        default=0.01,
        ge=0.0,
        description="Minimum trade amount in base-token units"
    )

    pairs: List[str] = Field(
        default=["SOL-USDC"],
        description="Trading pairs as BASE-QUOTE symbols"
    )

    update_interval: float = Field(
        default=5.0,
        gt=0.0,
        description="Seconds between trading cycles"
    )

    slippage_bps: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Quote slippage tolerance in basis points (0.5% = 50 bps)"
    )

    history_capacity: int = Field(
        default=1000,
        ge=1,
        description="Maximum trade records kept in memory"
    )

    quote_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=60.0,
        description="Timeout for price and quote requests"
    )

    portfolio_value: float = Field(
        default=10.0,
        ge=0.0,
        description="Portfolio value fed to the engine, in quote-token units"
    )

    @field_validator('pairs')
    @classmethod
    def pairs_are_base_quote(cls, v):
        """Validate that every pair looks like BASE-QUOTE."""
        for pair in v:
            parts = pair.split('-')
            if len(parts) != 2 or not all(parts):
                raise ValueError(f"Invalid trading pair '{pair}', expected BASE-QUOTE")
        return v


# ============================================================================
# Market Data Configuration
# ============================================================================

class MarketDataConfig(_ConfigModel):
    """Network and price source settings."""

    network: str = Field(
        default=PRIMARY_NETWORK,
        description="Solana cluster; Jupiter APIs only serve mainnet-beta"
    )

    jupiter_api: str = Field(
        default="https://quote-api.jup.ag/v6",
        description="Jupiter quote API base URL"
    )

    price_api: str = Field(
        default="https://price.jup.ag/v4",
        description="Jupiter price API base URL"
    )

    simulated_feed: bool = Field(
        default=True,
        description="Drive prices with a random walk instead of the price API"
    )

    simulation_seed: Optional[int] = Field(
        default=None,
        description="Seed for simulated prices (deterministic when set)"
    )

    @property
    def is_primary_network(self) -> bool:
        return self.network == PRIMARY_NETWORK


# ============================================================================
# Token Configuration
# ============================================================================

class TokenInfo(_ConfigModel):
    """Token mint address and decimals."""

    mint: str = Field(
        description="SPL token mint address"
    )

    decimals: int = Field(
        default=9,
        ge=0,
        le=18,
        description="Token decimals"
    )

    @field_validator('mint')
    @classmethod
    def mint_is_pubkey(cls, v):
        """Validate that the mint is a Solana public key."""
        try:
            Pubkey.from_string(v)
        except Exception as e:
            raise ValueError(f"Invalid mint address '{v}': {e}") from e
        return v


class TokenConfig(_ConfigModel):
    """Token registry keyed by symbol."""

    tokens: Dict[str, TokenInfo] = Field(
        default_factory=lambda: {
            "SOL": TokenInfo(mint=SOL_MINT, decimals=9),
            "USDC": TokenInfo(mint=USDC_MINT, decimals=6),
        },
        description="Token symbol -> mint info"
    )

    def get(self, symbol: str) -> TokenInfo:
        """
        Look up a token by symbol.

        Raises:
            UnknownTokenError: If the symbol is not configured
        """
        token = self.tokens.get(symbol.upper())
        if token is None:
            raise UnknownTokenError(f"No mint configured for token '{symbol}'")
        return token

    def resolve_pair(self, pair: str) -> Tuple[TokenInfo, TokenInfo]:
        """Split BASE-QUOTE and return (base, quote) token info."""
        base, _, quote = pair.partition('-')
        return self.get(base), self.get(quote)


# ============================================================================
# System Configuration
# ============================================================================

class SystemConfig(_ConfigModel):
    """System-wide settings."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level"
    )

    json_logs: bool = Field(
        default=False,
        description="Emit logs as JSON lines"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )

    api_host: str = Field(
        default="127.0.0.1",
        description="Status API host"
    )

    api_port: int = Field(
        default=8000,
        ge=1024,
        le=65535,
        description="Status API port"
    )


# ============================================================================
# Complete Application Configuration
# ============================================================================

class AppConfig(_ConfigModel):
    """Complete application configuration."""

    system: SystemConfig = Field(
        default_factory=SystemConfig,
        description="System configuration"
    )

    engine: EngineConfig = Field(
        default_factory=EngineConfig,
        alias="principia",
        description="Signal engine configuration"
    )

    trading: TradingConfig = Field(
        default_factory=TradingConfig,
        description="Trading configuration"
    )

    market_data: MarketDataConfig = Field(
        default_factory=MarketDataConfig,
        description="Market data configuration"
    )

    tokens: TokenConfig = Field(
        default_factory=TokenConfig,
        description="Token registry"
    )

    @field_validator('tokens', mode='before')
    @classmethod
    def wrap_token_mapping(cls, v):
        """Accept a bare symbol -> info mapping under 'tokens'."""
        if isinstance(v, dict) and 'tokens' not in v:
            return {'tokens': {str(k).upper(): info for k, info in v.items()}}
        return v
