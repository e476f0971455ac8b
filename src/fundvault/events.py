"""
Fund Events.

Append-only event log consumed by off-chain indexers. Event field sets are
part of the external interface: indexers reconstruct PnL from them, so
fields are only ever added, never renamed.

Events emitted during an operation stay pending until the operation
commits; a reverted operation discards its pending events.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Type

from fundvault.core import get_audit_logger, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FundEvent:
    """Base class for fund events."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data


@dataclass(frozen=True)
class SignerUpdated(FundEvent):
    old_signer: str
    new_signer: str


@dataclass(frozen=True)
class CreditAdded(FundEvent):
    recipient: str
    amount: int


@dataclass(frozen=True)
class CreditWithdrawn(FundEvent):
    recipient: str
    to: str
    amount: int


@dataclass(frozen=True)
class SwapExecuted(FundEvent):
    router: str
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    fee: int


@dataclass(frozen=True)
class Deposited(FundEvent):
    account: str
    value: int
    deposit_value: int
    shares: int
    protocol_fee: int
    buyback_fee: int
    nonce: int


@dataclass(frozen=True)
class DepositedAsset(FundEvent):
    account: str
    asset: str
    asset_index: int
    amount: int
    value_delta: int
    shares: int


@dataclass(frozen=True)
class AssetsUpdated(FundEvent):
    assets: Tuple[str, ...]


@dataclass(frozen=True)
class Rebalanced(FundEvent):
    nonce: int


@dataclass(frozen=True)
class Withdrawn(FundEvent):
    account: str
    shares: int
    capital: int
    net_output: int
    protocol_fee: int
    guru_fee: int
    gross_pnl: int


@dataclass(frozen=True)
class Closed(FundEvent):
    grace_period_end: int


@dataclass(frozen=True)
class MinUserDepositValueUpdated(FundEvent):
    old_value: int
    new_value: int


@dataclass(frozen=True)
class MinUserDepositCooldownUpdated(FundEvent):
    old_cooldown: int
    new_cooldown: int


@dataclass(frozen=True)
class ManagementFeeMinted(FundEvent):
    recipient: str
    amount: int
    timestamp: int


@dataclass(frozen=True)
class GracePeriodExtended(FundEvent):
    grace_period_end: int


@dataclass(frozen=True)
class AbandonedFundsClaimed(FundEvent):
    recipient: str
    amount: int


@dataclass(frozen=True)
class Transfer(FundEvent):
    sender: str
    recipient: str
    amount: int


@dataclass(frozen=True)
class CapitalTransferred(FundEvent):
    sender: str
    recipient: str
    amount: int


@dataclass(frozen=True)
class OwnershipTransferred(FundEvent):
    previous_owner: str
    new_owner: str


EVENT_TYPES: Dict[str, Type[FundEvent]] = {
    cls.__name__: cls
    for cls in (
        SignerUpdated,
        CreditAdded,
        CreditWithdrawn,
        SwapExecuted,
        Deposited,
        DepositedAsset,
        AssetsUpdated,
        Rebalanced,
        Withdrawn,
        Closed,
        MinUserDepositValueUpdated,
        MinUserDepositCooldownUpdated,
        ManagementFeeMinted,
        GracePeriodExtended,
        AbandonedFundsClaimed,
        Transfer,
        CapitalTransferred,
        OwnershipTransferred,
    )
}


def event_from_dict(name: str, data: Dict[str, Any]) -> FundEvent:
    """Rebuild an event from its name and ``to_dict`` output."""
    cls = EVENT_TYPES[name]
    kwargs = {}
    for f in fields(cls):
        value = data[f.name]
        kwargs[f.name] = tuple(value) if isinstance(value, list) else value
    return cls(**kwargs)


@dataclass(frozen=True)
class EventRecord:
    """A committed event with its position in the log."""

    sequence: int
    block_number: int
    timestamp: int
    event: FundEvent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "block_number": self.block_number,
            "timestamp": self.timestamp,
            "name": self.event.name,
            "data": self.event.to_dict(),
        }


class EventSink(Protocol):
    """Receiver of committed event batches (e.g. an SQLite repository)."""

    def append(self, records: List[EventRecord]) -> None:
        ...


@dataclass
class EventLog:
    """
    Pending/committed event log for one fund.

    Example:
        >>> log = EventLog(clock=lambda: (chain.block_number, chain.timestamp))
        >>> log.emit(Rebalanced(nonce=1))
        >>> log.commit()
        >>> [r.event.name for r in log.records]
        ['Rebalanced']
    """

    clock: Callable[[], Tuple[int, int]]
    sinks: List[EventSink] = field(default_factory=list)
    records: List[EventRecord] = field(default_factory=list)
    _pending: List[FundEvent] = field(default_factory=list)

    def emit(self, event: FundEvent) -> None:
        self._pending.append(event)

    @property
    def pending(self) -> List[FundEvent]:
        return list(self._pending)

    def snapshot(self) -> int:
        return len(self._pending)

    def restore(self, snapshot: int) -> None:
        del self._pending[snapshot:]

    def commit(self) -> List[EventRecord]:
        """Move pending events to the committed log and notify sinks."""
        if not self._pending:
            return []

        block_number, timestamp = self.clock()
        start = len(self.records)
        batch = [
            EventRecord(
                sequence=start + i,
                block_number=block_number,
                timestamp=timestamp,
                event=event,
            )
            for i, event in enumerate(self._pending)
        ]
        self._pending.clear()
        self.records.extend(batch)

        audit = get_audit_logger("fund")
        for record in batch:
            audit.fund_event(record.event.name, sequence=record.sequence, **record.event.to_dict())

        for sink in self.sinks:
            try:
                sink.append(batch)
            except Exception as e:
                logger.error(f"Event sink {sink.__class__.__name__} failed: {e}")

        logger.debug(f"Committed {len(batch)} events")
        return batch

    def of_type(self, event_type: Type[FundEvent]) -> List[FundEvent]:
        return [r.event for r in self.records if isinstance(r.event, event_type)]

    def last(self, event_type: Optional[Type[FundEvent]] = None) -> Optional[FundEvent]:
        for record in reversed(self.records):
            if event_type is None or isinstance(record.event, event_type):
                return record.event
        return None
