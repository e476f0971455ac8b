"""
Core module for FundVault.

Provides logging utilities, structured audit logging, shared constants and
the exception hierarchy.
"""

from .exceptions import FundVaultError
from .logger import get_logger, setup_logger
from .models import (
    BPS_DENOMINATOR,
    MANAGEMENT_FEE_DIVISOR,
    MAX_ASSETS,
    NO_ASSET,
    SHARE_DECIMALS,
    ZERO_ADDRESS,
    canonical_address,
    is_zero_address,
)
from .structured_logging import (
    AuditLogger,
    EventType,
    LogChannel,
    SecurityLogger,
    StructuredLogger,
    get_audit_logger,
    get_correlation_id,
    get_security_logger,
    set_correlation_id,
    with_correlation_id,
)

__all__ = [
    # Basic logging
    "setup_logger",
    "get_logger",
    # Structured logging
    "StructuredLogger",
    "AuditLogger",
    "SecurityLogger",
    "get_audit_logger",
    "get_security_logger",
    "LogChannel",
    "EventType",
    "set_correlation_id",
    "get_correlation_id",
    "with_correlation_id",
    # Errors
    "FundVaultError",
    # Constants
    "ZERO_ADDRESS",
    "NO_ASSET",
    "MAX_ASSETS",
    "SHARE_DECIMALS",
    "BPS_DENOMINATOR",
    "MANAGEMENT_FEE_DIVISOR",
    "is_zero_address",
    "canonical_address",
]
