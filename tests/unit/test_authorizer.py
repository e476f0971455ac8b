"""
Tests for signed-payload authorization and anti-replay nonces.
"""

import pytest

from fundvault.auth import (
    ActionType,
    Authorizer,
    EcdsaSigner,
    EcdsaVerifier,
    SignedPayload,
    domain_separator,
    signing_digest,
)
from fundvault.core import ZERO_ADDRESS
from fundvault.core.exceptions import (
    ExpiredAuthorization,
    InvalidAddress,
    InvalidSignature,
    InvalidSigner,
    NotProtocolOwner,
    SignerUnchanged,
)
from fundvault.events import SignerUpdated
from tests.mocks import ALICE, BOB, FUND, StubSigner, StubVerifier

PROTOCOL_OWNER = "0x" + "0" * 39 + "1"


@pytest.fixture
def stub_signer() -> StubSigner:
    return StubSigner("stub-signer-1")


@pytest.fixture
def authorizer(chain, events, stub_signer) -> Authorizer:
    return Authorizer(
        signer=stub_signer.signer_id,
        chain=chain,
        verifying_contract=FUND,
        protocol_owner=PROTOCOL_OWNER,
        events=events,
        verifier=StubVerifier(),
    )


def _payload(
    signer,
    authorizer,
    account,
    action=ActionType.WITHDRAW,
    data=b"{}",
    expires_at=200,
    nonce=None,
):
    return signer.sign_payload(
        authorizer.domain_separator,
        action,
        account,
        authorizer.nonce_of(account) if nonce is None else nonce,
        data,
        expires_at,
    )


class TestDigest:
    """Typed digest construction."""

    def test_domain_binds_chain_and_contract(self):
        base = domain_separator(1, FUND)

        assert domain_separator(2, FUND) != base
        assert domain_separator(1, ALICE) != base
        assert domain_separator(1, FUND.upper().replace("0X", "0x")) == base

    def test_digest_binds_every_field(self):
        domain = domain_separator(1, FUND)
        base = signing_digest(domain, ActionType.DEPOSIT, 0, ALICE, b"body", 100)

        assert signing_digest(domain, ActionType.WITHDRAW, 0, ALICE, b"body", 100) != base
        assert signing_digest(domain, ActionType.DEPOSIT, 1, ALICE, b"body", 100) != base
        assert signing_digest(domain, ActionType.DEPOSIT, 0, BOB, b"body", 100) != base
        assert signing_digest(domain, ActionType.DEPOSIT, 0, ALICE, b"other", 100) != base
        assert signing_digest(domain, ActionType.DEPOSIT, 0, ALICE, b"body", 101) != base

    def test_payload_rejects_negative_expiry(self):
        with pytest.raises(ValueError):
            SignedPayload(data=b"", signature=b"", expires_at=-1)

    def test_payload_dict_round_trip(self):
        payload = SignedPayload(data=b"\x01\x02", signature=b"\xff", expires_at=7)

        assert SignedPayload.from_dict(payload.to_dict()) == payload


class TestVerify:
    """Authorizer.verify."""

    def test_valid_payload_advances_nonce(self, authorizer, stub_signer):
        payload = _payload(stub_signer, authorizer, ALICE)

        authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

        assert authorizer.nonce_of(ALICE) == 1
        assert authorizer.nonce_of(BOB) == 0

    def test_replay_fails(self, authorizer, stub_signer):
        payload = _payload(stub_signer, authorizer, ALICE)
        authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

        with pytest.raises(InvalidSignature):
            authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

    def test_replay_under_case_variant_fails(self, authorizer, stub_signer):
        payload = _payload(stub_signer, authorizer, ALICE)
        authorizer.verify(ActionType.WITHDRAW, ALICE, payload)
        shouted = "0x" + ALICE[2:].upper()

        assert authorizer.nonce_of(shouted) == 1
        with pytest.raises(InvalidSignature):
            authorizer.verify(ActionType.WITHDRAW, shouted, payload)

    @pytest.mark.parametrize("account", ["", "alice", "0x1234", "0x" + "g" * 40])
    def test_malformed_account_rejected(self, authorizer, stub_signer, account):
        payload = _payload(stub_signer, authorizer, ALICE)

        with pytest.raises(InvalidAddress):
            authorizer.verify(ActionType.WITHDRAW, account, payload)

    def test_expired_payload_fails_even_if_signed(self, authorizer, stub_signer, chain):
        payload = _payload(stub_signer, authorizer, ALICE, expires_at=chain.block_number - 1)

        with pytest.raises(ExpiredAuthorization):
            authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

        assert authorizer.nonce_of(ALICE) == 0

    def test_expiry_at_current_block_is_accepted(self, authorizer, stub_signer, chain):
        payload = _payload(stub_signer, authorizer, ALICE, expires_at=chain.block_number)

        authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

    def test_payload_for_other_action_fails(self, authorizer, stub_signer):
        payload = _payload(stub_signer, authorizer, ALICE, action=ActionType.DEPOSIT)

        with pytest.raises(InvalidSignature):
            authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

    def test_payload_for_other_account_fails(self, authorizer, stub_signer):
        payload = _payload(stub_signer, authorizer, ALICE)

        with pytest.raises(InvalidSignature):
            authorizer.verify(ActionType.WITHDRAW, BOB, payload)

    def test_failed_signature_still_consumes_nonce(self, authorizer, stub_signer):
        payload = _payload(stub_signer, authorizer, ALICE, nonce=5)

        with pytest.raises(InvalidSignature):
            authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

        assert authorizer.nonce_of(ALICE) == 1

    def test_snapshot_restore_rolls_back_nonce(self, authorizer, stub_signer):
        snapshot = authorizer.snapshot()
        payload = _payload(stub_signer, authorizer, ALICE)
        authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

        authorizer.restore(snapshot)

        assert authorizer.nonce_of(ALICE) == 0
        authorizer.verify(ActionType.WITHDRAW, ALICE, payload)


class TestEcdsa:
    """secp256k1 signer and verifier."""

    def test_sign_and_verify(self, chain, events):
        signer = EcdsaSigner.generate()
        authorizer = Authorizer(signer.signer_id, chain, FUND, PROTOCOL_OWNER, events)
        payload = signer.sign_payload(
            authorizer.domain_separator, ActionType.CLOSE, ALICE, 0, b"{}", 500
        )

        authorizer.verify(ActionType.CLOSE, ALICE, payload)

    def test_other_key_is_rejected(self):
        signer = EcdsaSigner.generate()
        other = EcdsaSigner.generate()
        digest = b"\x11" * 32

        assert EcdsaVerifier().verify(signer.signer_id, digest, signer.sign_digest(digest))
        assert not EcdsaVerifier().verify(signer.signer_id, digest, other.sign_digest(digest))

    def test_malformed_signer_id_is_rejected(self):
        assert not EcdsaVerifier().verify("not-a-key", b"\x00" * 32, b"sig")

    def test_pem_round_trip(self, tmp_path):
        signer = EcdsaSigner.generate()
        path = tmp_path / "signer.pem"
        path.write_bytes(signer.to_pem())

        assert EcdsaSigner.from_file(path).signer_id == signer.signer_id


class TestUpdateSigner:
    """Signer rotation."""

    def test_rotation_by_protocol_owner(self, authorizer, events, stub_signer):
        authorizer.update_signer(PROTOCOL_OWNER, "stub-signer-2")

        assert authorizer.signer == "stub-signer-2"
        assert events.pending == [
            SignerUpdated(old_signer=stub_signer.signer_id, new_signer="stub-signer-2")
        ]

    def test_old_signer_payloads_rejected_after_rotation(self, authorizer, stub_signer):
        authorizer.update_signer(PROTOCOL_OWNER, "stub-signer-2")
        payload = _payload(stub_signer, authorizer, ALICE)

        with pytest.raises(InvalidSignature):
            authorizer.verify(ActionType.WITHDRAW, ALICE, payload)

    def test_only_protocol_owner(self, authorizer):
        with pytest.raises(NotProtocolOwner):
            authorizer.update_signer(ALICE, "stub-signer-2")

    @pytest.mark.parametrize("new_signer", ["", ZERO_ADDRESS])
    def test_rejects_empty_signer(self, authorizer, new_signer):
        with pytest.raises(InvalidSigner):
            authorizer.update_signer(PROTOCOL_OWNER, new_signer)

    def test_rejects_unchanged_signer(self, authorizer, stub_signer):
        with pytest.raises(SignerUnchanged):
            authorizer.update_signer(PROTOCOL_OWNER, stub_signer.signer_id)
