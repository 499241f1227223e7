"""Configuration Manager.

Loads beacon-health configuration once at startup.

Precedence: registry defaults < TOML file < environment variables.
Environment variables use the BEACON_HEALTH_ prefix, e.g.
BEACON_HEALTH_DATABASE_CHAIN_PATH overrides database.chain_path. A .env
file, if present, is loaded into the environment first.
"""

import os
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

from dotenv import load_dotenv
import structlog

from ..capabilities.observe import DBPaths
from .registry import (
    REGISTRY,
    get_config_key,
    get_default_values,
    validate_config_value,
)

logger = structlog.get_logger(__name__)

ENV_PREFIX = "BEACON_HEALTH_"


class ConfigManager:
    """Holds the validated configuration for one embedding process.

    Attributes:
        config: Loaded configuration keyed by dotted path
        config_file: TOML file read by load()
        env_file: .env file loaded into the environment by load()
    """

    def __init__(self, config_file: Optional[Path] = None, env_file: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file (default: config/default.toml)
            env_file: Path to .env file (default: .env in working directory)
        """
        self.config: dict[str, Any] = {}
        self.config_file = config_file if config_file is not None else Path("config/default.toml")
        self.env_file = env_file if env_file is not None else Path(".env")

        logger.info("config_manager_initialized",
                    config_file=str(self.config_file),
                    env_file=str(self.env_file))

    def load(self) -> dict[str, Any]:
        """Load configuration from defaults, TOML and environment variables.

        Returns:
            Dictionary of configuration key-value pairs

        Raises:
            ValueError: If an environment override cannot be parsed or any
                value fails validation

        Note:
            A missing config file is not an error; defaults are used with a warning.
        """
        if self.env_file.exists():
            load_dotenv(self.env_file)
            logger.info("env_file_loaded", env_file=str(self.env_file))

        config = get_default_values()

        if self.config_file.exists():
            with open(self.config_file, "rb") as f:
                toml_data = tomllib.load(f)

            flattened = self._flatten_toml(toml_data)
            for key in REGISTRY:
                if key in flattened:
                    config[key] = flattened[key]

            logger.info("toml_config_loaded", keys_count=len(flattened))
        else:
            logger.warning("config_file_not_found",
                           config_file=str(self.config_file),
                           using_defaults=True)

        for key in REGISTRY:
            env_key = ENV_PREFIX + key.replace(".", "_").upper()
            env_value = os.getenv(env_key)
            if env_value is None:
                continue
            try:
                config[key] = self._parse_env_value(env_value, get_config_key(key).value_type)
            except ValueError as e:
                logger.error("env_parse_error", key=key, env_key=env_key, error=str(e))
                raise ValueError(f"Failed to parse env var {env_key}: {e}")
            logger.info("env_override_applied", key=key, env_key=env_key)

        for key, value in config.items():
            is_valid, error_msg = validate_config_value(key, value)
            if not is_valid:
                logger.error("config_validation_failed", key=key, error=error_msg)
                raise ValueError(f"Config validation failed for '{key}': {error_msg}")

        self.config = config
        logger.info("config_loaded", keys_count=len(config))
        return config

    def get(self, key: str) -> Any:
        """Get configuration value.

        Raises:
            KeyError: If key not found
        """
        config_key_def = get_config_key(key)
        return self.config.get(key, config_key_def.default)

    def db_paths(self) -> DBPaths:
        """Return the configured chain and freezer database paths."""
        return DBPaths(
            chain_db=Path(self.get("database.chain_path")).expanduser(),
            freezer_db=Path(self.get("database.freezer_path")).expanduser(),
        )

    def _flatten_toml(self, data: dict) -> dict[str, Any]:
        """Flatten nested TOML structure to dotted keys.

        Example: {"database": {"chain_path": "..."}} -> {"database.chain_path": "..."}
        """
        result = {}

        def _flatten(d: dict, prefix: str = ""):
            for key, value in d.items():
                full_key = f"{prefix}.{key}" if prefix else key
                if isinstance(value, dict):
                    _flatten(value, full_key)
                else:
                    result[full_key] = value

        _flatten(data)
        return result

    def _parse_env_value(self, value: str, target_type: type) -> Any:
        """Parse environment variable string to target type.

        Raises:
            ValueError: If parsing fails
        """
        if target_type == bool:
            return value.lower() in ("true", "1", "yes", "on")
        elif target_type == int:
            return int(value)
        elif target_type == float:
            return float(value)
        elif target_type == str:
            return value
        else:
            raise ValueError(f"Unsupported type for env parsing: {target_type}")


# Global instance (initialized by the embedding application)
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global config manager instance.

    Raises:
        RuntimeError: If config manager not initialized
    """
    if _config_manager is None:
        raise RuntimeError("ConfigManager not initialized. Call initialize_config() first.")
    return _config_manager


def initialize_config(config_file: Optional[Path] = None,
                      env_file: Optional[Path] = None) -> ConfigManager:
    """Initialize global configuration manager.

    Args:
        config_file: Path to TOML config file
        env_file: Path to .env file

    Returns:
        Initialized ConfigManager instance
    """
    global _config_manager
    _config_manager = ConfigManager(config_file, env_file)
    _config_manager.load()
    return _config_manager
