"""
Configuration loader with YAML + environment variable support.

Loads and validates config/config.yaml.
Supports:
- ${ENV_VAR} / ${ENV_VAR:default} placeholders
- Environment variable overrides
- Pydantic validation
- Reload on demand (hot reload without restarting the engine)
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from principia.config.settings import AppConfig
from principia.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

# Get the project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

# Load environment variables from .env file
load_dotenv(PROJECT_ROOT / ".env")


class ConfigLoader:
    """
    Configuration loader with YAML + environment variable support.

    Features:
    - Loads configuration from a YAML file
    - Overrides with environment variables
    - Validates using Pydantic models
    - Caches the validated config until reload()
    """

    def __init__(self, config_dir: Optional[Path] = None, config_name: str = "config"):
        """
        Initialize configuration loader.

        Args:
            config_dir: Configuration directory (defaults to PROJECT_ROOT/config)
            config_name: Config file name without the .yaml extension
        """
        self.config_dir = Path(config_dir) if config_dir else (PROJECT_ROOT / "config")
        self.config_name = config_name
        self._cache: Dict[str, Any] = {}
        logger.info(f"ConfigLoader initialized with config_dir: {self.config_dir}")

    @property
    def config_path(self) -> Path:
        return self.config_dir / f"{self.config_name}.yaml"

    def load_yaml(self) -> Dict[str, Any]:
        """
        Load the YAML configuration file.

        Returns:
            Dictionary containing configuration data

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file is not a YAML mapping
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        logger.debug(f"Loading YAML config from: {self.config_path}")

        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigurationError(f"Config file {self.config_path} must contain a mapping")

        return self._replace_env_vars(config)

    def _replace_env_vars(self, config: Any) -> Any:
        """
        Recursively replace environment variable placeholders in config.

        Placeholders format: ${ENV_VAR_NAME} or ${ENV_VAR_NAME:default_value}
        """
        if isinstance(config, dict):
            return {k: self._replace_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._replace_env_vars(item) for item in config]
        elif isinstance(config, str):
            if config.startswith("${") and config.endswith("}"):
                env_expr = config[2:-1]

                if ":" in env_expr:
                    var_name, default_value = env_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default_value.strip())
                else:
                    var_name = env_expr.strip()
                    value = os.getenv(var_name)
                    if value is None:
                        logger.warning(f"Environment variable {var_name} not set, using empty string")
                        return ""
                    return value

        return config

    def load_app_config(self, use_cache: bool = True) -> AppConfig:
        """
        Load complete application configuration.

        Args:
            use_cache: Use cached config if available

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigurationError: If validation fails
        """
        cache_key = "app_config"

        if use_cache and cache_key in self._cache:
            logger.debug("Returning cached app config")
            return self._cache[cache_key]

        logger.info("Loading application configuration")

        try:
            config_data = self.load_yaml()
        except FileNotFoundError:
            logger.warning(f"{self.config_path.name} not found, using defaults")
            config_data = {}

        config_data = self._apply_env_overrides(config_data)

        try:
            app_config = AppConfig.model_validate(config_data)
            logger.info("Application configuration loaded and validated successfully")
        except PydanticValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        if use_cache:
            self._cache[cache_key] = app_config

        return app_config

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        Recognised variables: LOG_LEVEL, SOLANA_NETWORK, DRY_RUN, TRADING_PAIRS
        """
        if env_val := os.getenv("LOG_LEVEL"):
            _set_key(config, "system", "log_level", env_val.upper())

        if env_val := os.getenv("SOLANA_NETWORK"):
            _set_key(config, "market_data", "network", env_val)

        if env_val := os.getenv("DRY_RUN"):
            _set_key(config, "trading", "dry_run", env_val.strip().lower() not in ("false", "0", "no"))

        if env_val := os.getenv("TRADING_PAIRS"):
            _set_key(config, "trading", "pairs", [p.strip() for p in env_val.split(",") if p.strip()])

        return config

    def reload(self) -> AppConfig:
        """
        Reload configuration from disk (hot reload).

        Returns:
            Fresh AppConfig instance
        """
        logger.info("Reloading configuration from disk")
        self._cache.clear()
        return self.load_app_config(use_cache=False)

    def clear_cache(self):
        """Clear the configuration cache."""
        logger.info("Clearing configuration cache")
        self._cache.clear()


def _set_key(config: Dict[str, Any], section: str, key: str, value: Any) -> None:
    """Set section.key, reusing whichever spelling (camelCase or snake_case) the file used."""
    section_key = to_camel(section) if to_camel(section) in config else section
    values = config.setdefault(section_key, {})
    if values is None:
        values = config[section_key] = {}
    camel = to_camel(key)
    values[camel if camel in values else key] = value


# Global instance for convenience
_global_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get or create global ConfigLoader instance."""
    global _global_loader
    if _global_loader is None:
        _global_loader = ConfigLoader()
    return _global_loader


def get_app_config(use_cache: bool = True) -> AppConfig:
    """Get complete application configuration."""
    return get_config_loader().load_app_config(use_cache=use_cache)


def reload_config() -> AppConfig:
    """Reload configuration from disk (hot reload)."""
    return get_config_loader().reload()
