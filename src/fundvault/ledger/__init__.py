"""
Fund Ledger.

Share accounting, invested capital, cooldowns, swap execution and escrow
for a pooled fund.
"""

from .actions import (
    ACTION_BODIES,
    ActionBody,
    AssetDepositAction,
    AssetUpdate,
    CloseAction,
    DepositAction,
    RebalanceAction,
    SingleSwapAction,
    WithdrawAction,
)
from .cooldown import CooldownBook, CooldownEntry, CooldownQueue
from .escrow import Escrow
from .fund import FundLedger
from .registry import ProtocolRegistry
from .shares import ShareLedger
from .state import FundState
from .swaps import RouterRevert, SwapExecutor, SwapInstruction, SwapResult, SwapRouter
from .transaction import AtomicScope, OperationGuard

__all__ = [
    # Ledger
    "FundLedger",
    "FundState",
    "ShareLedger",
    "ProtocolRegistry",
    # Cooldowns
    "CooldownBook",
    "CooldownQueue",
    "CooldownEntry",
    # Swaps and escrow
    "SwapExecutor",
    "SwapInstruction",
    "SwapResult",
    "SwapRouter",
    "RouterRevert",
    "Escrow",
    # Actions
    "ActionBody",
    "AssetUpdate",
    "DepositAction",
    "AssetDepositAction",
    "RebalanceAction",
    "SingleSwapAction",
    "WithdrawAction",
    "CloseAction",
    "ACTION_BODIES",
    # Scope
    "AtomicScope",
    "OperationGuard",
]
