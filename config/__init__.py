"""Configuration management package for oidc-client"""

from .loader import ConfigError, ConfigLoader, get_config_loader, load_client_config

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "get_config_loader",
    "load_client_config",
]
