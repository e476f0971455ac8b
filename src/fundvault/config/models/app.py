"""
Application Configuration Model.

Integrates all sub-configurations into a single configuration object.
"""

from pathlib import Path

import yaml
from pydantic import Field, field_validator

from .base import BaseConfig
from .fund import FundPolicyConfig
from .registry import RegistryConfig


class StorageConfig(BaseConfig):
    """Event store configuration."""

    db_path: str = Field(default="data/fundvault.db", description="SQLite event store path")


class AppConfig(BaseConfig):
    """
    Main application configuration.

    Example:
        >>> config = AppConfig.from_yaml("config/config.yaml")
        >>> config.registry.deposit_fee_bps
        100
    """

    app_name: str = Field(default="FundVault", description="Application name")
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    fund: FundPolicyConfig = Field(default_factory=FundPolicyConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate and normalize environment."""
        v = v.lower().strip()
        valid_envs = {"development", "staging", "production", "dev", "prod", "test"}
        if v not in valid_envs:
            v = "development"
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        v = v.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            v = "INFO"
        return v

    @property
    def is_production(self) -> bool:
        return self.environment in ("production", "prod")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        """Load configuration from a single YAML file without overlays."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
