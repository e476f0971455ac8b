"""
Tests for push-or-credit payouts.
"""

import pytest

from fundvault.core.exceptions import NativeTransferFailed, NoCreditAvailable
from fundvault.events import CreditAdded, CreditWithdrawn
from fundvault.ledger import Escrow
from tests.mocks import ALICE, BOB, ETH, FUND


@pytest.fixture
def escrow(chain, events) -> Escrow:
    chain.mint_native(FUND, 10 * ETH)
    return Escrow(chain, FUND, events)


class TestPushOrCredit:

    def test_push_succeeds(self, escrow, chain, events):
        assert escrow.push_or_credit(ALICE, ETH) is True

        assert chain.native_balance(ALICE) == ETH
        assert escrow.credit_of(ALICE) == 0
        assert events.pending == []

    def test_rejected_push_becomes_credit(self, escrow, chain, events):
        chain.set_rejects_native(ALICE)

        assert escrow.push_or_credit(ALICE, ETH) is False

        assert chain.native_balance(ALICE) == 0
        assert chain.native_balance(FUND) == 10 * ETH
        assert escrow.credit_of(ALICE) == ETH
        assert escrow.total_credits == ETH
        assert events.pending == [CreditAdded(recipient=ALICE, amount=ETH)]

    def test_credits_accumulate(self, escrow, chain):
        chain.set_rejects_native(ALICE)

        escrow.push_or_credit(ALICE, ETH)
        escrow.push_or_credit(ALICE, 2 * ETH)

        assert escrow.credit_of(ALICE) == 3 * ETH

    def test_zero_amount_is_noop(self, escrow, events):
        assert escrow.push_or_credit(ALICE, 0) is True
        assert events.pending == []


class TestWithdrawCredit:

    def test_pays_out_to_chosen_address(self, escrow, chain, events):
        chain.set_rejects_native(ALICE)
        escrow.push_or_credit(ALICE, ETH)

        amount = escrow.withdraw_credit(ALICE, BOB)

        assert amount == ETH
        assert chain.native_balance(BOB) == ETH
        assert escrow.credit_of(ALICE) == 0
        assert events.pending[-1] == CreditWithdrawn(recipient=ALICE, to=BOB, amount=ETH)

    def test_nothing_owed(self, escrow):
        with pytest.raises(NoCreditAvailable):
            escrow.withdraw_credit(ALICE, ALICE)

    def test_failed_push_raises(self, escrow, chain):
        chain.set_rejects_native(ALICE)
        escrow.push_or_credit(ALICE, ETH)

        with pytest.raises(NativeTransferFailed):
            escrow.withdraw_credit(ALICE, ALICE)
