"""
Action bodies carried in signed payloads.

Each body encodes to canonical JSON (sorted keys, compact separators)
with an ``action`` discriminator. The encoded bytes are what the
off-chain signer hashes, so encoding must stay deterministic.
"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Tuple, Type, TypeVar

from fundvault.core.exceptions import MalformedPayload

from .swaps import SwapInstruction

A = TypeVar("A", bound="ActionBody")


def _uint(data: Dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    if value < 0:
        raise ValueError(f"{key} cannot be negative")
    return value


def _int(data: Dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return value


def _swaps(data: Dict[str, Any], key: str = "swaps") -> Tuple[SwapInstruction, ...]:
    return tuple(SwapInstruction.from_dict(item) for item in data.get(key, []))


@dataclass(frozen=True)
class AssetUpdate:
    """Assignment of an asset to a basket slot."""

    index: int
    asset: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "asset": self.asset}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssetUpdate":
        return cls(index=_uint(data, "index"), asset=str(data["asset"]))


def _updates(data: Dict[str, Any]) -> Tuple[AssetUpdate, ...]:
    return tuple(AssetUpdate.from_dict(item) for item in data.get("asset_updates", []))


class ActionBody:
    """Base class for signed action bodies."""

    ACTION: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    @classmethod
    def from_dict(cls: Type[A], data: Dict[str, Any]) -> A:
        raise NotImplementedError

    def encode(self) -> bytes:
        body = self.to_dict()
        body["action"] = self.ACTION
        return json.dumps(body, sort_keys=True, separators=(",", ":")).encode("utf-8")

    @classmethod
    def decode(cls: Type[A], raw: bytes) -> A:
        """
        Decode and validate an encoded body.

        Raises:
            MalformedPayload: If the bytes are not a valid body of this action
        """
        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("body must be an object")
            if data.get("action") != cls.ACTION:
                raise ValueError(f"expected action {cls.ACTION!r}, got {data.get('action')!r}")
            return cls.from_dict(data)
        except (UnicodeDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedPayload(
                f"Malformed {cls.ACTION} payload: {e}",
                details={"action": cls.ACTION},
            ) from e


@dataclass(frozen=True)
class DepositAction(ActionBody):
    """
    Depositor contribution in native currency.

    ``nonce`` pins the fund nonce (basket composition) the swaps were
    computed against.
    """

    ACTION: ClassVar[str] = "Deposit"

    nonce: int
    net_amount: int
    protocol_fee: int
    buyback_fee: int
    fee_recipient: str
    deposit_value: int
    tvl_before: int
    swaps: Tuple[SwapInstruction, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nonce": self.nonce,
            "net_amount": self.net_amount,
            "protocol_fee": self.protocol_fee,
            "buyback_fee": self.buyback_fee,
            "fee_recipient": self.fee_recipient,
            "deposit_value": self.deposit_value,
            "tvl_before": self.tvl_before,
            "swaps": [s.to_dict() for s in self.swaps],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DepositAction":
        return cls(
            nonce=_uint(data, "nonce"),
            net_amount=_uint(data, "net_amount"),
            protocol_fee=_uint(data, "protocol_fee"),
            buyback_fee=_uint(data, "buyback_fee"),
            fee_recipient=str(data["fee_recipient"]),
            deposit_value=_uint(data, "deposit_value"),
            tvl_before=_uint(data, "tvl_before"),
            swaps=_swaps(data),
        )


@dataclass(frozen=True)
class AssetDepositAction(ActionBody):
    """Operator deposit of a basket asset."""

    ACTION: ClassVar[str] = "AssetDeposit"

    asset: str
    asset_index: int
    amount: int
    tvl_before: int
    tvl_after: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset": self.asset,
            "asset_index": self.asset_index,
            "amount": self.amount,
            "tvl_before": self.tvl_before,
            "tvl_after": self.tvl_after,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssetDepositAction":
        return cls(
            asset=str(data["asset"]),
            asset_index=_uint(data, "asset_index"),
            amount=_uint(data, "amount"),
            tvl_before=_uint(data, "tvl_before"),
            tvl_after=_uint(data, "tvl_after"),
        )


@dataclass(frozen=True)
class RebalanceAction(ActionBody):
    """Arbitrary slot updates followed by arbitrary swaps."""

    ACTION: ClassVar[str] = "Rebalance"

    asset_updates: Tuple[AssetUpdate, ...] = ()
    swaps: Tuple[SwapInstruction, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_updates": [u.to_dict() for u in self.asset_updates],
            "swaps": [s.to_dict() for s in self.swaps],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RebalanceAction":
        return cls(asset_updates=_updates(data), swaps=_swaps(data))


@dataclass(frozen=True)
class SingleSwapAction(ActionBody):
    """One swap with the base asset on one leg."""

    ACTION: ClassVar[str] = "SingleSwap"

    swap: SwapInstruction
    asset_updates: Tuple[AssetUpdate, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "swap": self.swap.to_dict(),
            "asset_updates": [u.to_dict() for u in self.asset_updates],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SingleSwapAction":
        return cls(swap=SwapInstruction.from_dict(data["swap"]), asset_updates=_updates(data))


@dataclass(frozen=True)
class WithdrawAction(ActionBody):
    """
    Share redemption.

    ``gross_pnl`` is signed: fees are only settled when it is positive.
    """

    ACTION: ClassVar[str] = "Withdraw"

    shares: int
    capital: int
    net_output: int
    protocol_fee: int = 0
    guru_fee: int = 0
    gross_pnl: int = 0
    swaps: Tuple[SwapInstruction, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shares": self.shares,
            "capital": self.capital,
            "net_output": self.net_output,
            "protocol_fee": self.protocol_fee,
            "guru_fee": self.guru_fee,
            "gross_pnl": self.gross_pnl,
            "swaps": [s.to_dict() for s in self.swaps],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WithdrawAction":
        return cls(
            shares=_uint(data, "shares"),
            capital=_uint(data, "capital"),
            net_output=_uint(data, "net_output"),
            protocol_fee=_uint(data, "protocol_fee"),
            guru_fee=_uint(data, "guru_fee"),
            gross_pnl=_int(data, "gross_pnl"),
            swaps=_swaps(data),
        )


@dataclass(frozen=True)
class CloseAction(ActionBody):
    """Fund closure with final liquidation swaps."""

    ACTION: ClassVar[str] = "Close"

    swaps: Tuple[SwapInstruction, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"swaps": [s.to_dict() for s in self.swaps]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CloseAction":
        return cls(swaps=_swaps(data))


ACTION_BODIES: List[Type[ActionBody]] = [
    DepositAction,
    AssetDepositAction,
    RebalanceAction,
    SingleSwapAction,
    WithdrawAction,
    CloseAction,
]
