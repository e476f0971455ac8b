"""
Fund state aggregate.

All fund-wide mutable state lives in one ``FundState`` owned by the
``FundLedger``; operations mutate it only inside the ledger's atomic scope.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List

from fundvault.core import MAX_ASSETS, NO_ASSET, ZERO_ADDRESS


def _empty_slots() -> List[str]:
    return [NO_ASSET] * MAX_ASSETS


@dataclass
class FundState:
    """
    Fund-wide state.

    Attributes:
        initialized: Set once by ``initialize``
        is_open: False after closure
        owner: Operator address
        assets: Basket slots; ``NO_ASSET`` marks an empty slot
        nonce: Fund nonce, bumped on every swap and rebalance
        min_deposit_value: Minimum declared deposit value
        min_deposit_cooldown: Seconds new shares stay locked
        latest_fee_mint_time: Timestamp of the last management fee mint
        grace_period_end: End of the post-closure withdrawal window
        invested_capital: Net contributed capital per account
        total_value: Last declared fund TVL
    """

    initialized: bool = False
    is_open: bool = False
    owner: str = ZERO_ADDRESS
    assets: List[str] = field(default_factory=_empty_slots)
    nonce: int = 0
    min_deposit_value: int = 0
    min_deposit_cooldown: int = 0
    latest_fee_mint_time: int = 0
    grace_period_end: int = 0
    invested_capital: Dict[str, int] = field(default_factory=dict)
    total_value: int = 0

    def capital_of(self, account: str) -> int:
        return self.invested_capital.get(account, 0)

    def add_capital(self, account: str, amount: int) -> None:
        self.invested_capital[account] = self.capital_of(account) + amount

    def remove_capital(self, account: str, amount: int) -> None:
        remaining = self.capital_of(account) - amount
        if remaining < 0:
            raise ValueError(f"Capital of {account} would become negative")
        self.invested_capital[account] = remaining

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initialized": self.initialized,
            "is_open": self.is_open,
            "owner": self.owner,
            "assets": list(self.assets),
            "nonce": self.nonce,
            "min_deposit_value": self.min_deposit_value,
            "min_deposit_cooldown": self.min_deposit_cooldown,
            "latest_fee_mint_time": self.latest_fee_mint_time,
            "grace_period_end": self.grace_period_end,
            "invested_capital": dict(self.invested_capital),
            "total_value": self.total_value,
        }

    def snapshot(self) -> "FundState":
        return deepcopy(self)

    def restore(self, snapshot: "FundState") -> None:
        self.__dict__.update(deepcopy(snapshot).__dict__)
