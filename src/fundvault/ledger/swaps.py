"""
Swap Execution Helper.

Calls an external exchange router on the fund's behalf, measures the
realized balance deltas and forwards the declared swap fee. No price or
slippage checks are made here; the signed payload carrying the swap is
the only control over what gets executed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from fundvault.chain import ChainState
from fundvault.core import get_logger
from fundvault.core.exceptions import FundVaultError, SwapExecutionFailed
from fundvault.events import EventLog, SwapExecuted

from .escrow import Escrow

logger = get_logger(__name__)


class RouterRevert(Exception):
    """Raised by a router to fail the call with a reason."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class SwapRouter(Protocol):
    """
    External exchange capability.

    ``swap`` pulls input from ``caller`` using the allowance granted for
    this call and credits output to ``caller``; it raises ``RouterRevert``
    to fail.
    """

    def swap(self, chain: ChainState, caller: str, call_data: bytes) -> None:
        ...


@dataclass(frozen=True)
class SwapInstruction:
    """
    One router call declared in a signed action.

    Attributes:
        router: Router address
        token_in: Asset sent to the router
        token_out: Asset expected back
        amount_in: Allowance granted to the router for the call
        call_data: Router-specific call data
        fee: Fee in the base asset forwarded to the swap fee collector
    """

    router: str
    token_in: str
    token_out: str
    amount_in: int
    call_data: bytes = b""
    fee: int = 0

    def __post_init__(self) -> None:
        if self.amount_in < 0:
            raise ValueError("amount_in cannot be negative")
        if self.fee < 0:
            raise ValueError("fee cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "router": self.router,
            "token_in": self.token_in,
            "token_out": self.token_out,
            "amount_in": self.amount_in,
            "call_data": self.call_data.hex(),
            "fee": self.fee,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SwapInstruction":
        return cls(
            router=data["router"],
            token_in=data["token_in"],
            token_out=data["token_out"],
            amount_in=int(data["amount_in"]),
            call_data=bytes.fromhex(data.get("call_data", "")),
            fee=int(data.get("fee", 0)),
        )


@dataclass(frozen=True)
class SwapResult:
    """Realized balance deltas of one swap."""

    amount_in: int
    amount_out: int
    fee: int = 0


@dataclass
class SwapExecutor:
    """
    Executes swap instructions against registered routers.

    Example:
        >>> executor = SwapExecutor(chain, fund_address, escrow, events,
        ...                         fee_collector, routers={router_addr: router})
        >>> result = executor.execute(instruction)
    """

    chain: ChainState
    holder: str
    escrow: Escrow
    events: EventLog
    fee_collector: str
    routers: Dict[str, SwapRouter] = field(default_factory=dict)

    def register_router(self, address: str, router: SwapRouter) -> None:
        self.routers[address] = router

    def execute(self, swap: SwapInstruction) -> SwapResult:
        """
        Execute one swap and forward its fee.

        Raises:
            SwapExecutionFailed: If the router is unknown or its call fails
        """
        router = self.routers.get(swap.router)
        if router is None:
            raise SwapExecutionFailed(
                reason="unknown router",
                details={"router": swap.router},
            )

        in_before = self.chain.balance_of(swap.token_in, self.holder)
        out_before = self.chain.balance_of(swap.token_out, self.holder)

        self.chain.approve(swap.token_in, self.holder, swap.router, swap.amount_in)
        try:
            router.swap(self.chain, self.holder, swap.call_data)
        except RouterRevert as e:
            raise SwapExecutionFailed(reason=e.reason, details={"router": swap.router}) from e
        except FundVaultError as e:
            raise SwapExecutionFailed(reason=str(e), details={"router": swap.router}) from e
        self.chain.approve(swap.token_in, self.holder, swap.router, 0)

        amount_in = in_before - self.chain.balance_of(swap.token_in, self.holder)
        amount_out = self.chain.balance_of(swap.token_out, self.holder) - out_before

        if swap.fee > 0:
            self.chain.unwrap(self.holder, swap.fee)
            self.escrow.push_or_credit(self.fee_collector, swap.fee)

        self.events.emit(
            SwapExecuted(
                router=swap.router,
                token_in=swap.token_in,
                token_out=swap.token_out,
                amount_in=amount_in,
                amount_out=amount_out,
                fee=swap.fee,
            )
        )
        logger.info(
            f"Swap via {swap.router}: {amount_in} {swap.token_in} -> "
            f"{amount_out} {swap.token_out} (fee {swap.fee})"
        )
        return SwapResult(amount_in=amount_in, amount_out=amount_out, fee=swap.fee)

    def execute_all(self, swaps: Optional[List[SwapInstruction]]) -> List[SwapResult]:
        return [self.execute(swap) for swap in swaps or []]
