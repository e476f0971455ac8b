"""
Chain State.

In-memory host environment for the fund: native currency balances,
fungible asset balances and allowances, block height and timestamp.
Wrapping native currency into the base asset is provided here so the
ledger can treat it as an external collaborator.
"""

import time
from copy import deepcopy
from typing import Any, Dict, Optional, Set, Tuple

from fundvault.core import get_logger
from fundvault.core.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    NativeTransferFailed,
)

logger = get_logger(__name__)


class ChainState:
    """
    Balances and clock seen by a fund ledger.

    Block height and timestamp only move forward through ``advance`` and
    are not part of ``snapshot``; balances and allowances are.

    Example:
        >>> chain = ChainState(wrapped_asset="0x...03")
        >>> chain.mint_native(alice, 10 * 10**18)
        >>> chain.wrap(alice, 10**18)
        >>> chain.balance_of("0x...03", alice)
        1000000000000000000
    """

    def __init__(
        self,
        wrapped_asset: str,
        chain_id: int = 1,
        block_number: int = 1,
        timestamp: Optional[int] = None,
    ):
        self.wrapped_asset = wrapped_asset
        self.chain_id = chain_id
        self.block_number = block_number
        self.timestamp = int(time.time()) if timestamp is None else timestamp

        self._native: Dict[str, int] = {}
        self._tokens: Dict[str, Dict[str, int]] = {}
        self._allowances: Dict[Tuple[str, str, str], int] = {}
        self._native_rejectors: Set[str] = set()

    # =========================================================================
    # Clock
    # =========================================================================

    def advance(self, blocks: int = 0, seconds: int = 0) -> None:
        """Move block height and time forward."""
        if blocks < 0 or seconds < 0:
            raise ValueError("Chain clock cannot move backwards")
        self.block_number += blocks
        self.timestamp += seconds

    # =========================================================================
    # Native currency
    # =========================================================================

    def native_balance(self, holder: str) -> int:
        return self._native.get(holder, 0)

    def mint_native(self, holder: str, amount: int) -> None:
        """Credit native currency out of thin air (genesis/faucet)."""
        self._native[holder] = self.native_balance(holder) + amount

    def set_rejects_native(self, holder: str, rejects: bool = True) -> None:
        """Make ``holder`` refuse incoming native pushes."""
        if rejects:
            self._native_rejectors.add(holder)
        else:
            self._native_rejectors.discard(holder)

    def send_native(self, sender: str, recipient: str, amount: int) -> None:
        """
        Push native currency.

        Raises:
            InsufficientBalance: If sender cannot cover the amount
            NativeTransferFailed: If the recipient rejects the push
        """
        balance = self.native_balance(sender)
        if amount > balance:
            raise InsufficientBalance(
                details={"holder": sender, "balance": balance, "required": amount}
            )
        if recipient in self._native_rejectors:
            raise NativeTransferFailed(details={"recipient": recipient, "amount": amount})
        self._native[sender] = balance - amount
        self._native[recipient] = self.native_balance(recipient) + amount

    # =========================================================================
    # Fungible assets
    # =========================================================================

    def balance_of(self, asset: str, holder: str) -> int:
        return self._tokens.get(asset, {}).get(holder, 0)

    def mint_token(self, asset: str, holder: str, amount: int) -> None:
        """Credit an asset balance out of thin air (genesis/faucet)."""
        balances = self._tokens.setdefault(asset, {})
        balances[holder] = balances.get(holder, 0) + amount

    def transfer_token(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        balances = self._tokens.setdefault(asset, {})
        balance = balances.get(sender, 0)
        if amount > balance:
            raise InsufficientBalance(
                details={"asset": asset, "holder": sender, "balance": balance, "required": amount}
            )
        balances[sender] = balance - amount
        balances[recipient] = balances.get(recipient, 0) + amount

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        self._allowances[(asset, owner, spender)] = amount

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        return self._allowances.get((asset, owner, spender), 0)

    def transfer_token_from(
        self,
        asset: str,
        spender: str,
        owner: str,
        recipient: str,
        amount: int,
    ) -> None:
        """Pull ``amount`` of ``asset`` from ``owner`` using ``spender``'s allowance."""
        allowed = self.allowance(asset, owner, spender)
        if amount > allowed:
            raise InsufficientAllowance(
                details={"asset": asset, "owner": owner, "spender": spender, "allowance": allowed}
            )
        self.transfer_token(asset, owner, recipient, amount)
        self._allowances[(asset, owner, spender)] = allowed - amount

    # =========================================================================
    # Wrapping
    # =========================================================================

    def wrap(self, holder: str, amount: int) -> None:
        """Convert native currency into the wrapped base asset."""
        balance = self.native_balance(holder)
        if amount > balance:
            raise InsufficientBalance(
                details={"holder": holder, "balance": balance, "required": amount}
            )
        self._native[holder] = balance - amount
        self.mint_token(self.wrapped_asset, holder, amount)

    def unwrap(self, holder: str, amount: int) -> None:
        """Convert the wrapped base asset back into native currency."""
        balances = self._tokens.setdefault(self.wrapped_asset, {})
        balance = balances.get(holder, 0)
        if amount > balance:
            raise InsufficientBalance(
                details={
                    "asset": self.wrapped_asset,
                    "holder": holder,
                    "balance": balance,
                    "required": amount,
                }
            )
        balances[holder] = balance - amount
        self._native[holder] = self.native_balance(holder) + amount

    # =========================================================================
    # Snapshots
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        """Capture balances and allowances for rollback."""
        return {
            "native": dict(self._native),
            "tokens": deepcopy(self._tokens),
            "allowances": dict(self._allowances),
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        """Restore balances and allowances captured by ``snapshot``."""
        self._native = dict(snapshot["native"])
        self._tokens = deepcopy(snapshot["tokens"])
        self._allowances = dict(snapshot["allowances"])
        logger.debug("Chain balances restored from snapshot")
