"""
Cooldown Queue.

Per-account FIFO of locked share tranches gating share movements.

Each account keeps ``entries`` in mint order and an ``offset`` marking the
first entry that may still be locked. The locked balance is found by
scanning from the newest entry back towards ``offset`` and stopping at the
first expired entry: with non-decreasing unlock times everything older
than that entry has expired too, so the scan is amortized O(1).

If the cooldown duration is lowered between mints a newer entry can
unlock before an older one. The scan then stops at the newer expired
entry and the older, still-locked tranche is treated as unlocked and
compacted away. This behaviour is kept as is; see DESIGN.md.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from fundvault.core import get_logger
from fundvault.core.exceptions import CooldownNotExpired

logger = get_logger(__name__)


@dataclass
class CooldownEntry:
    """A tranche of shares locked until ``unlock_time``."""

    unlock_time: int
    amount: int


@dataclass
class CooldownQueue:
    """Lazily compacted tranche queue for one account."""

    offset: int = 0
    entries: List[CooldownEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries) - self.offset


class CooldownBook:
    """
    Cooldown queues for all share holders.

    Example:
        >>> book = CooldownBook()
        >>> book.apply_lock(alice, 100, unlock_time=now + 3600)
        >>> book.locked_balance(alice, now)
        (100, 0)
    """

    def __init__(self) -> None:
        self._queues: Dict[str, CooldownQueue] = {}

    def queue(self, account: str) -> CooldownQueue:
        """Return the account's queue (empty if none)."""
        return self._queues.get(account) or CooldownQueue()

    def apply_lock(self, account: str, amount: int, unlock_time: int) -> None:
        """Append a locked tranche."""
        if amount <= 0:
            return
        queue = self._queues.setdefault(account, CooldownQueue())
        queue.entries.append(CooldownEntry(unlock_time=unlock_time, amount=amount))

    def locked_balance(self, account: str, now: int) -> Tuple[int, int]:
        """
        Compute the locked balance by scanning backwards from the newest tranche.

        Returns:
            (locked amount, new offset) where every entry before the new
            offset is considered expired
        """
        queue = self._queues.get(account)
        if queue is None:
            return 0, 0

        locked = 0
        index = len(queue.entries)
        while index > queue.offset:
            entry = queue.entries[index - 1]
            if entry.unlock_time <= now:
                break
            locked += entry.amount
            index -= 1

        return locked, index

    def compact(self, account: str, new_offset: int) -> None:
        """Drop expired tranches: clear the queue or advance its offset."""
        queue = self._queues.get(account)
        if queue is None:
            return
        if new_offset >= len(queue.entries):
            del self._queues[account]
            logger.debug(f"Cooldown queue cleared for {account}")
        elif new_offset > queue.offset:
            queue.offset = new_offset

    def enforce(self, account: str, balance: int, amount: int, now: int) -> int:
        """
        Check that ``amount`` shares of ``balance`` are unlocked.

        Compacts the queue as a side effect.

        Returns:
            The locked balance at ``now``

        Raises:
            CooldownNotExpired: If the unlocked balance is below ``amount``
        """
        locked, new_offset = self.locked_balance(account, now)
        self.compact(account, new_offset)

        if balance - locked < amount:
            raise CooldownNotExpired(
                details={
                    "account": account,
                    "balance": balance,
                    "locked": locked,
                    "requested": amount,
                }
            )
        return locked

    def snapshot(self) -> Dict[str, CooldownQueue]:
        return deepcopy(self._queues)

    def restore(self, snapshot: Dict[str, CooldownQueue]) -> None:
        self._queues = deepcopy(snapshot)
