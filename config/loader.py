"""Configuration loader for the OIDC client

Loads configuration from multiple sources with the following priority:
1. Environment variables (highest priority)
2. .env file
3. Hardcoded defaults (lowest priority)
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional
from dotenv import load_dotenv

from oidc_client.discovery import DEFAULT_DISCOVERY_PATH
from oidc_client.models import OidcClientConfig

# Set up logger for config loader
logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when required configuration is missing"""


class ConfigLoader:
    """Reads settings from the environment, seeded from an optional .env file"""

    def __init__(self, env_path: Optional[str] = None):
        """
        Args:
            env_path: Path to a .env file (default: '.env' in the working directory)
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self._load_env_file()

    def _load_env_file(self):
        if not self.env_path.exists():
            logger.debug(f"No .env file at {self.env_path}, reading the process environment only")
            return
        # existing environment variables win over the file
        load_dotenv(dotenv_path=self.env_path)
        logger.debug(f"Loaded environment variables from {self.env_path}")

    def get(self, env_var: str, default: Any) -> Any:
        """Get a configuration value, coerced to the type of ``default``

        Args:
            env_var: Environment variable name
            default: Value used when the variable is unset or unparsable

        Returns:
            The environment value or ``default``
        """
        raw = os.getenv(env_var)
        if raw is None:
            if isinstance(default, str) and default.startswith("~/"):
                return str(Path(default).expanduser())
            return default

        if isinstance(default, bool):
            return raw.lower() in ("true", "1", "yes")
        if isinstance(default, (int, float)):
            try:
                return type(default)(raw)
            except ValueError:
                logger.warning(f"Ignoring {env_var}={raw!r}: not a valid {type(default).__name__}, using {default}")
                return default
        return raw

    def get_list(self, env_var: str, default: Optional[List[str]] = None) -> List[str]:
        """Get a space separated list value"""
        value = self.get(env_var, "")
        if not value:
            return list(default or [])
        return value.split()


# Create a global instance
_config_loader = None

def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_client_config(loader: Optional[ConfigLoader] = None) -> OidcClientConfig:
    """Build the client configuration from the environment

    Reads OIDC_ENDPOINT and OIDC_CLIENT_ID (required) plus the optional
    OIDC_SCOPES, OIDC_RESOURCES, OIDC_PROMPT and OIDC_DISCOVERY_PATH.

    Raises:
        ConfigError: If a required value is missing
    """
    loader = loader or get_config_loader()

    endpoint = loader.get("OIDC_ENDPOINT", "")
    client_id = loader.get("OIDC_CLIENT_ID", "")
    missing = [name for name, value in (("OIDC_ENDPOINT", endpoint), ("OIDC_CLIENT_ID", client_id)) if not value]
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    config = OidcClientConfig(
        endpoint=endpoint,
        client_id=client_id,
        scopes=loader.get_list("OIDC_SCOPES"),
        resources=loader.get_list("OIDC_RESOURCES"),
        prompt=loader.get("OIDC_PROMPT", "consent"),
        discovery_path=loader.get("OIDC_DISCOVERY_PATH", DEFAULT_DISCOVERY_PATH),
    )
    logger.debug(f"Loaded client configuration for {config.client_id} at {config.endpoint}")
    return config
