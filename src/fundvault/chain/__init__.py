"""
Host environment for FundVault.
"""

from .state import ChainState

__all__ = ["ChainState"]
