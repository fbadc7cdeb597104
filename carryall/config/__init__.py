"""Configuration module for carryall."""

from carryall.config.loader import load_config, get_config_path, save_config
from carryall.config.schema import ClientConfig, Config, ServerConfig
from carryall.config.access import get_config, clear_config_cache

__all__ = [
    "ClientConfig",
    "Config",
    "ServerConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "get_config",
    "clear_config_cache",
]
