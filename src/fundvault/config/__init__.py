"""
Configuration package for FundVault.

Pydantic models loaded from YAML with .env and ${VAR:default} support.
"""

from .exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from .loader import ConfigLoader, load_config
from .models import (
    AppConfig,
    BaseConfig,
    FundPolicyConfig,
    RegistryConfig,
    StorageConfig,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "AppConfig",
    "BaseConfig",
    "FundPolicyConfig",
    "RegistryConfig",
    "StorageConfig",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
]
