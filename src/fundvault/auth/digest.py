"""
Typed signing digest for fund actions.

The digest binds the action type tag, the account's authorization nonce,
the account, a hash of the opaque action body and the expiration height,
under a domain separator naming the chain and the verifying fund.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

DOMAIN_NAME = "FundVault"
DOMAIN_VERSION = "1"


class ActionType(str, Enum):
    """Action type tags bound into every signature."""

    DEPOSIT = "Deposit"
    ASSET_DEPOSIT = "AssetDeposit"
    REBALANCE = "Rebalance"
    SWAP_TOKENS_FOR_ETH = "SwapTokensForETH"
    SWAP_ETH_FOR_TOKENS = "SwapETHForTokens"
    WITHDRAW = "Withdraw"
    CLOSE = "Close"


@dataclass(frozen=True)
class SignedPayload:
    """
    Off-chain authorization envelope.

    Attributes:
        data: Opaque encoded action body
        signature: Signature over the typed digest
        expires_at: Last block height at which the payload is accepted
    """

    data: bytes
    signature: bytes
    expires_at: int

    def __post_init__(self) -> None:
        if self.expires_at < 0:
            raise ValueError("expires_at cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data.hex(),
            "signature": self.signature.hex(),
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignedPayload":
        return cls(
            data=bytes.fromhex(data["data"]),
            signature=bytes.fromhex(data["signature"]),
            expires_at=int(data["expires_at"]),
        )


def _uint256(value: int) -> bytes:
    return value.to_bytes(32, "big")


def _text(value: str) -> bytes:
    raw = value.encode("utf-8")
    return _uint256(len(raw)) + raw


def domain_separator(chain_id: int, verifying_contract: str) -> bytes:
    """Hash of the signing domain for one fund on one chain."""
    return hashlib.sha256(
        _text(DOMAIN_NAME)
        + _text(DOMAIN_VERSION)
        + _uint256(chain_id)
        + _text(verifying_contract.lower())
    ).digest()


def struct_hash(
    action: ActionType,
    nonce: int,
    account: str,
    data: bytes,
    expires_at: int,
) -> bytes:
    return hashlib.sha256(
        _text(ActionType(action).value)
        + _uint256(nonce)
        + _text(account.lower())
        + hashlib.sha256(data).digest()
        + _uint256(expires_at)
    ).digest()


def signing_digest(
    domain: bytes,
    action: ActionType,
    nonce: int,
    account: str,
    data: bytes,
    expires_at: int,
) -> bytes:
    """Digest the off-chain signer signs and the authorizer recomputes."""
    return hashlib.sha256(
        b"\x19\x01" + domain + struct_hash(action, nonce, account, data, expires_at)
    ).digest()
