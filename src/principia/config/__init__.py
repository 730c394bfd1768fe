"""
Configuration management module.

Loads configuration from YAML files and provides validated models.
"""

from .settings import (
    AppConfig,
    EngineConfig,
    TradingConfig,
    MarketDataConfig,
    TokenConfig,
    TokenInfo,
    SystemConfig,
    resolve_config,
)
from .loader import ConfigLoader, get_app_config, reload_config

__all__ = [
    'AppConfig',
    'EngineConfig',
    'TradingConfig',
    'MarketDataConfig',
    'TokenConfig',
    'TokenInfo',
    'SystemConfig',
    'resolve_config',
    'ConfigLoader',
    'get_app_config',
    'reload_config',
]
