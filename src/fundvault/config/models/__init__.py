# Configuration models
from .app import AppConfig, StorageConfig
from .base import BaseConfig
from .fund import FundPolicyConfig
from .registry import RegistryConfig

__all__ = [
    "BaseConfig",
    "FundPolicyConfig",
    "RegistryConfig",
    "StorageConfig",
    "AppConfig",
]
