"""
Event Repository.

SQLite-based storage for committed fund events, replayable by off-chain
indexers.
"""

import json
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from fundvault.core import get_logger
from fundvault.events import EventRecord, event_from_dict

logger = get_logger(__name__)

DEFAULT_DB_PATH = "data/fundvault.db"

# Event fields naming the primary account and its counterparty
_ACCOUNT_FIELDS = ("account", "sender", "recipient", "previous_owner")
_COUNTERPARTY_FIELDS = ("recipient", "to", "new_owner")


@dataclass
class CapitalSummary:
    """Capital flows of one account reconstructed from stored events."""

    account: str
    deposited: int = 0
    withdrawn: int = 0
    transferred_in: int = 0
    transferred_out: int = 0

    @property
    def net_capital(self) -> int:
        return self.deposited - self.withdrawn + self.transferred_in - self.transferred_out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account": self.account,
            "deposited": self.deposited,
            "withdrawn": self.withdrawn,
            "transferred_in": self.transferred_in,
            "transferred_out": self.transferred_out,
            "net_capital": self.net_capital,
        }


def _pick(data: Dict[str, Any], keys: tuple) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str):
            return value
    return None


class EventRepository:
    """
    SQLite repository for fund events.

    Usable directly as an ``EventSink`` of a ``FundLedger``. Amounts are
    kept inside the JSON payload since they may exceed SQLite's 64-bit
    integers.

    Example:
        >>> repo = EventRepository("data/fundvault.db")
        >>> repo.initialize()
        >>> fund = FundLedger(address, chain, registry, signer_id, sinks=[repo])
        >>> repo.get_events(name="Deposited")
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH, fund: str = ""):
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
            fund: Fund address stored alongside each event
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._fund = fund
        self._initialized = False

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    fund TEXT NOT NULL,
                    sequence INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    block_number INTEGER NOT NULL,
                    timestamp INTEGER NOT NULL,
                    account TEXT,
                    counterparty TEXT,
                    data TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (fund, sequence)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_name
                ON events(name)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_account
                ON events(account)
            """)

        self._initialized = True
        logger.info(f"EventRepository initialized: {self._db_path}")

    # =========================================================================
    # Writes
    # =========================================================================

    def append(self, records: List[EventRecord]) -> None:
        """
        Store a committed batch of events.

        Args:
            records: Records in commit order
        """
        self.initialize()
        rows = []
        for record in records:
            data = record.event.to_dict()
            rows.append(
                (
                    self._fund,
                    record.sequence,
                    record.event.name,
                    record.block_number,
                    record.timestamp,
                    _pick(data, _ACCOUNT_FIELDS),
                    _pick(data, _COUNTERPARTY_FIELDS),
                    json.dumps(data, sort_keys=True),
                )
            )

        with self._get_connection() as conn:
            conn.executemany(
                """
                INSERT OR REPLACE INTO events
                (fund, sequence, name, block_number, timestamp, account,
                 counterparty, data)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        logger.debug(f"Stored {len(rows)} events")

    # =========================================================================
    # Queries
    # =========================================================================

    def get_events(
        self,
        name: Optional[str] = None,
        account: Optional[str] = None,
        fund: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get stored events in commit order.

        Args:
            name: Filter by event name
            account: Filter by account (either side of the event)
            fund: Filter by fund address
            limit: Maximum number of events, most recent kept

        Returns:
            List of event dicts with ``sequence``, ``name``, ``block_number``,
            ``timestamp`` and ``data``
        """
        self.initialize()
        query = "SELECT * FROM events WHERE 1=1"
        params: List[Any] = []

        if name:
            query += " AND name = ?"
            params.append(name)
        if account:
            query += " AND (account = ? OR counterparty = ?)"
            params.extend([account, account])
        if fund:
            query += " AND fund = ?"
            params.append(fund)

        query += " ORDER BY fund, sequence DESC"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()

        return [self._row_to_dict(row) for row in reversed(rows)]

    def count(self, name: Optional[str] = None) -> int:
        self.initialize()
        with self._get_connection() as conn:
            if name:
                row = conn.execute("SELECT COUNT(*) FROM events WHERE name = ?", (name,)).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM events").fetchone()
        return row[0]

    def load_events(self, name: Optional[str] = None) -> list:
        """Rebuild typed events from storage."""
        return [event_from_dict(e["name"], e["data"]) for e in self.get_events(name=name)]

    def capital_summary(self, fund: Optional[str] = None) -> Dict[str, CapitalSummary]:
        """
        Reconstruct per-account capital flows.

        Deposits count declared deposit value and asset deposits their TVL
        increase. Withdrawals count the capital released, and capital-aware
        share transfers move capital between accounts.

        Returns:
            Mapping of account to CapitalSummary
        """
        summaries: Dict[str, CapitalSummary] = {}

        def summary(account: str) -> CapitalSummary:
            if account not in summaries:
                summaries[account] = CapitalSummary(account=account)
            return summaries[account]

        for event in self.get_events(fund=fund):
            data = event["data"]
            if event["name"] == "Deposited":
                summary(data["account"]).deposited += data["deposit_value"]
            elif event["name"] == "DepositedAsset":
                summary(data["account"]).deposited += data["value_delta"]
            elif event["name"] == "Withdrawn":
                summary(data["account"]).withdrawn += data["capital"]
            elif event["name"] == "CapitalTransferred":
                summary(data["sender"]).transferred_out += data["amount"]
                summary(data["recipient"]).transferred_in += data["amount"]

        return summaries

    def _row_to_dict(self, row: sqlite3.Row) -> Dict[str, Any]:
        return {
            "fund": row["fund"],
            "sequence": row["sequence"],
            "name": row["name"],
            "block_number": row["block_number"],
            "timestamp": row["timestamp"],
            "data": json.loads(row["data"]),
        }
