"""
Authorization Layer.

Validates signed payloads against a single trusted off-chain signer with
expiration and per-account replay protection.
"""

from typing import Any, Dict, Optional

from fundvault.chain import ChainState
from fundvault.core import (
    canonical_address,
    get_logger,
    get_security_logger,
    is_zero_address,
)
from fundvault.core.exceptions import (
    ExpiredAuthorization,
    InvalidSignature,
    InvalidSigner,
    NotProtocolOwner,
    SignerUnchanged,
)
from fundvault.events import EventLog, SignerUpdated

from .digest import ActionType, SignedPayload, domain_separator, signing_digest
from .signers import EcdsaVerifier, SignatureVerifier

logger = get_logger(__name__)


class Authorizer:
    """
    Signed-payload verifier with per-account authorization nonces.

    ``verify`` consumes the account's nonce whether or not the signature
    checks out. Callers run it inside the operation's atomic scope so a
    reverted operation also reverts the nonce.

    Nonces are keyed by the lowercase address, the same form the digest
    binds, so a case variant of an account shares its nonce.

    Example:
        >>> auth = Authorizer(signer.signer_id, chain, fund_address, owner, events)
        >>> auth.verify(ActionType.WITHDRAW, account, payload)
    """

    def __init__(
        self,
        signer: str,
        chain: ChainState,
        verifying_contract: str,
        protocol_owner: str,
        events: EventLog,
        verifier: Optional[SignatureVerifier] = None,
    ):
        if is_zero_address(signer):
            raise InvalidSigner(details={"signer": signer})

        self._signer = signer
        self._chain = chain
        self._verifying_contract = verifying_contract
        self._protocol_owner = protocol_owner
        self._events = events
        self._verifier = verifier or EcdsaVerifier()
        self._nonces: Dict[str, int] = {}
        self._security = get_security_logger("authorizer")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def signer(self) -> str:
        return self._signer

    @property
    def domain_separator(self) -> bytes:
        return domain_separator(self._chain.chain_id, self._verifying_contract)

    def nonce_of(self, account: str) -> int:
        """Authorization nonce the next payload for ``account`` must be signed with."""
        return self._nonces.get(canonical_address(account), 0)

    # =========================================================================
    # Verification
    # =========================================================================

    def verify(self, action: ActionType, account: str, payload: SignedPayload) -> None:
        """
        Verify ``payload`` for ``action`` on behalf of ``account``.

        Raises:
            ExpiredAuthorization: If the payload expired before the current block
            InvalidSignature: If the configured signer did not sign the digest
        """
        action = ActionType(action)
        account = canonical_address(account)

        if payload.expires_at < self._chain.block_number:
            self._security.auth_failure(action.value, account, "expired")
            raise ExpiredAuthorization(
                details={
                    "expires_at": payload.expires_at,
                    "block_number": self._chain.block_number,
                }
            )

        nonce = self.nonce_of(account)
        digest = signing_digest(
            self.domain_separator,
            action,
            nonce,
            account,
            payload.data,
            payload.expires_at,
        )
        self._nonces[account] = nonce + 1

        if not self._verifier.verify(self._signer, digest, payload.signature):
            self._security.auth_failure(action.value, account, "bad signature")
            raise InvalidSignature(details={"action": action.value, "account": account})

        self._security.auth_success(action.value, account, nonce)

    # =========================================================================
    # Signer rotation
    # =========================================================================

    def update_signer(self, caller: str, new_signer: str) -> None:
        """
        Rotate the trusted signer.

        Raises:
            NotProtocolOwner: If caller is not the protocol owner
            InvalidSigner: If the new signer is empty or the zero address
            SignerUnchanged: If the new signer equals the current one
        """
        if caller != self._protocol_owner:
            raise NotProtocolOwner(details={"caller": caller})
        if is_zero_address(new_signer):
            raise InvalidSigner(details={"signer": new_signer})
        if new_signer == self._signer:
            raise SignerUnchanged(details={"signer": new_signer})

        old_signer = self._signer
        self._signer = new_signer
        self._events.emit(SignerUpdated(old_signer=old_signer, new_signer=new_signer))
        logger.info(f"Signer rotated: {old_signer[:10]}... -> {new_signer[:10]}...")

    # =========================================================================
    # Snapshots
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        return {"signer": self._signer, "nonces": dict(self._nonces)}

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self._signer = snapshot["signer"]
        self._nonces = dict(snapshot["nonces"])
