# Configuration - registry and startup loader

from .manager import ConfigManager, get_config_manager, initialize_config

__all__ = ["ConfigManager", "get_config_manager", "initialize_config"]
