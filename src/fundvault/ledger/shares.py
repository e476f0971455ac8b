"""
Share Ledger.

Fungible share balances with fixed 6-decimal precision. Unrestricted
transfers are disabled; the fund moves shares only through its
capital-aware path.
"""

from typing import Any, Dict

from fundvault.core import SHARE_DECIMALS, ZERO_ADDRESS
from fundvault.core.exceptions import InsufficientBalance, TransfersDisabled
from fundvault.events import EventLog, Transfer


class ShareLedger:
    """Share balances and total supply of one fund."""

    def __init__(self, name: str, symbol: str, events: EventLog):
        self.name = name
        self.symbol = symbol
        self._events = events
        self._balances: Dict[str, int] = {}
        self._total_supply = 0

    @property
    def decimals(self) -> int:
        # Valuation-unit precision, independent of the basket assets
        return SHARE_DECIMALS

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def holders(self) -> Dict[str, int]:
        return {a: b for a, b in self._balances.items() if b > 0}

    # =========================================================================
    # Disabled token surface
    # =========================================================================

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        raise TransfersDisabled(details={"sender": sender, "recipient": recipient})

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> None:
        raise TransfersDisabled(details={"sender": sender, "recipient": recipient})

    # =========================================================================
    # Internal movements (called by the fund ledger)
    # =========================================================================

    def mint(self, account: str, amount: int) -> None:
        self._update(ZERO_ADDRESS, account, amount)

    def burn(self, account: str, amount: int) -> None:
        self._update(account, ZERO_ADDRESS, amount)

    def move(self, sender: str, recipient: str, amount: int) -> None:
        self._update(sender, recipient, amount)

    def _update(self, sender: str, recipient: str, amount: int) -> None:
        if sender == ZERO_ADDRESS:
            self._total_supply += amount
        else:
            balance = self.balance_of(sender)
            if amount > balance:
                raise InsufficientBalance(
                    details={"account": sender, "balance": balance, "required": amount}
                )
            self._balances[sender] = balance - amount

        if recipient == ZERO_ADDRESS:
            self._total_supply -= amount
        else:
            self._balances[recipient] = self.balance_of(recipient) + amount

        self._events.emit(Transfer(sender=sender, recipient=recipient, amount=amount))

    # =========================================================================
    # Snapshots
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        return {"balances": dict(self._balances), "total_supply": self._total_supply}

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self._balances = dict(snapshot["balances"])
        self._total_supply = snapshot["total_supply"]
