"""
FundVault Storage.

Persistence layer for committed fund events.
"""

from .repository import DEFAULT_DB_PATH, CapitalSummary, EventRepository

__all__ = ["EventRepository", "CapitalSummary", "DEFAULT_DB_PATH"]
