"""Configuration Registry - Defines all configuration keys.

This module provides the ConfigKey dataclass and REGISTRY dictionary that defines
all configuration options available in beacon-health. Every key is read once at
startup; changing a value requires restarting the embedding process.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class ConfigKey:
    """Defines a single configuration key with validation.

    Attributes:
        value_type: Expected Python type (str, int, float, bool, list)
        default: Default value if not specified in config files
        validator: Custom validation function (optional)
    """
    value_type: type
    default: Any
    validator: Optional[Callable[[Any], bool]] = None


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


REGISTRY: dict[str, ConfigKey] = {
    # ===== DATABASE PATHS (supplied by the embedding node) =====
    "database.chain_path": ConfigKey(
        value_type=str,
        default="data/beacon/chain_db",
        validator=lambda v: v.strip() != "",
    ),
    "database.freezer_path": ConfigKey(
        value_type=str,
        default="data/beacon/freezer_db",
        validator=lambda v: v.strip() != "",
    ),

    # ===== LOGGING =====
    "logging.level": ConfigKey(
        value_type=str,
        default="INFO",
        validator=lambda v: v in LOG_LEVELS,
    ),
    "logging.json": ConfigKey(
        value_type=bool,
        default=False,
    ),
}


def get_config_key(key: str) -> ConfigKey:
    """Get configuration key definition.

    Raises:
        KeyError: If key not found in registry
    """
    if key not in REGISTRY:
        raise KeyError(f"Unknown configuration key: {key}")
    return REGISTRY[key]


def validate_config_value(key: str, value: Any) -> tuple[bool, Optional[str]]:
    """Validate a configuration value against its registry definition.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        config_key = get_config_key(key)
    except KeyError as e:
        return False, str(e)

    if not isinstance(value, config_key.value_type):
        return False, (
            f"Expected type {config_key.value_type.__name__}, "
            f"got {type(value).__name__}"
        )

    if config_key.validator and not config_key.validator(value):
        return False, f"Custom validation failed for value: {value}"

    return True, None


def get_default_values() -> dict[str, Any]:
    """Get all default configuration values."""
    return {key: config_key.default for key, config_key in REGISTRY.items()}
