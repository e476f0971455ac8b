"""
FundVault.

Accounting and authorization engine for pooled investment funds.

Includes:
- FundLedger: Share, capital and cooldown accounting behind signed payloads
- Authorizer: Typed-digest verification with per-account anti-replay nonces
- SwapExecutor / Escrow: Router settlement and push-or-credit payouts
- EventRepository: SQLite store of committed fund events
"""

from .auth import ActionType, Authorizer, EcdsaSigner, EcdsaVerifier, SignedPayload
from .chain import ChainState
from .config import AppConfig, load_config
from .events import EventLog, EventRecord, FundEvent
from .ledger import FundLedger, ProtocolRegistry, SwapInstruction
from .storage import EventRepository

__version__ = "0.1.0"

__all__ = [
    "FundLedger",
    "ProtocolRegistry",
    "SwapInstruction",
    "Authorizer",
    "ActionType",
    "SignedPayload",
    "EcdsaSigner",
    "EcdsaVerifier",
    "ChainState",
    "AppConfig",
    "load_config",
    "EventLog",
    "EventRecord",
    "FundEvent",
    "EventRepository",
]
