"""
Escrow Helper.

Best-effort native currency push with fallback to a pull-payment credit.
"""

from typing import Dict

from fundvault.chain import ChainState
from fundvault.core import get_logger
from fundvault.core.exceptions import NativeTransferFailed, NoCreditAvailable
from fundvault.events import CreditAdded, CreditWithdrawn, EventLog

logger = get_logger(__name__)


class Escrow:
    """
    Push-or-credit payments out of the fund's native balance.

    Credited amounts stay in the fund's native balance until the
    recipient pulls them with ``withdraw_credit``.
    """

    def __init__(self, chain: ChainState, holder: str, events: EventLog):
        self._chain = chain
        self._holder = holder
        self._events = events
        self._credits: Dict[str, int] = {}

    def credit_of(self, recipient: str) -> int:
        return self._credits.get(recipient, 0)

    @property
    def total_credits(self) -> int:
        return sum(self._credits.values())

    def push_or_credit(self, recipient: str, amount: int) -> bool:
        """
        Push ``amount`` to ``recipient``; credit it if the push is rejected.

        Returns:
            True if pushed, False if credited
        """
        if amount <= 0:
            return True

        try:
            self._chain.send_native(self._holder, recipient, amount)
            return True
        except NativeTransferFailed:
            self._credits[recipient] = self.credit_of(recipient) + amount
            self._events.emit(CreditAdded(recipient=recipient, amount=amount))
            logger.warning(f"Push of {amount} to {recipient} rejected, credited instead")
            return False

    def withdraw_credit(self, recipient: str, to: str) -> int:
        """
        Pay out ``recipient``'s accumulated credit to ``to``.

        Raises:
            NoCreditAvailable: If nothing is owed
            NativeTransferFailed: If the push to ``to`` fails
        """
        amount = self._credits.pop(recipient, 0)
        if amount == 0:
            raise NoCreditAvailable(details={"recipient": recipient})

        self._chain.send_native(self._holder, to, amount)
        self._events.emit(CreditWithdrawn(recipient=recipient, to=to, amount=amount))
        logger.info(f"Credit of {amount} withdrawn by {recipient} to {to}")
        return amount

    def snapshot(self) -> Dict[str, int]:
        return dict(self._credits)

    def restore(self, snapshot: Dict[str, int]) -> None:
        self._credits = dict(snapshot)
