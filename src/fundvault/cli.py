"""
FundVault CLI.

Command-line interface over the event store and signer keys.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from fundvault.auth import EcdsaSigner
from fundvault.config import ConfigError, load_config
from fundvault.core import get_logger
from fundvault.storage import DEFAULT_DB_PATH, CapitalSummary, EventRepository

logger = get_logger(__name__)


class FundVaultCLI:
    """
    Command-line interface for FundVault.

    Example:
        >>> cli = FundVaultCLI(repository)
        >>> cli.run(["events", "--name", "Deposited"])
        >>> cli.run(["capital"])
    """

    def __init__(self, repository: Optional[EventRepository] = None):
        self._repository = repository
        self._parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog="fundvault",
            description="FundVault CLI for inspecting fund events and managing signer keys",
        )
        parser.add_argument("--db", type=str, help="Path to the SQLite event store")
        parser.add_argument("--config", "-c", type=str, help="Path to configuration file")
        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        # events command
        events_parser = subparsers.add_parser("events", help="List stored fund events")
        events_parser.add_argument("--name", "-n", type=str, help="Filter by event name")
        events_parser.add_argument("--account", "-a", type=str, help="Filter by account")
        events_parser.add_argument("--fund", "-f", type=str, help="Filter by fund address")
        events_parser.add_argument(
            "--limit", "-l",
            type=int,
            default=50,
            help="Maximum events to show (default: 50)",
        )
        events_parser.add_argument("--json", action="store_true", help="Print JSON lines")

        # capital command
        capital_parser = subparsers.add_parser(
            "capital",
            help="Per-account capital summary from stored events",
        )
        capital_parser.add_argument("--fund", "-f", type=str, help="Filter by fund address")

        # keygen command
        keygen_parser = subparsers.add_parser("keygen", help="Generate a signer key pair")
        keygen_parser.add_argument(
            "--out", "-o",
            type=str,
            help="Write the private key PEM to this file",
        )

        return parser

    def run(self, args: List[str]) -> int:
        """
        Run CLI command.

        Args:
            args: Command-line arguments

        Returns:
            Exit code (0 for success)
        """
        if not args:
            self._parser.print_help()
            return 0

        parsed = self._parser.parse_args(args)

        if not parsed.command:
            self._parser.print_help()
            return 0

        try:
            if self._repository is None and parsed.command != "keygen":
                self._repository = self._open_repository(parsed)
            handler = getattr(self, f"_cmd_{parsed.command}", None)
            if handler:
                return handler(parsed)
            else:
                print(f"Unknown command: {parsed.command}")
                return 1
        except (ConfigError, OSError, ValueError) as e:
            print(f"Error: {e}")
            logger.error(f"CLI error: {e}")
            return 1

    def _open_repository(self, args: argparse.Namespace) -> EventRepository:
        db_path = args.db
        if db_path is None and args.config:
            db_path = load_config(args.config).storage.db_path
        repository = EventRepository(db_path or DEFAULT_DB_PATH)
        repository.initialize()
        return repository

    # =========================================================================
    # Command Handlers
    # =========================================================================

    def _cmd_events(self, args: argparse.Namespace) -> int:
        """Handle events command."""
        events = self._repository.get_events(
            name=args.name,
            account=args.account,
            fund=args.fund,
            limit=args.limit,
        )

        if not events:
            print("No events found")
            return 0

        if args.json:
            for event in events:
                print(json.dumps(event, sort_keys=True))
        else:
            self._print_events(events)
        return 0

    def _cmd_capital(self, args: argparse.Namespace) -> int:
        """Handle capital command."""
        summaries = self._repository.capital_summary(fund=args.fund)

        if not summaries:
            print("No capital movements found")
            return 0

        self._print_capital(list(summaries.values()))
        return 0

    def _cmd_keygen(self, args: argparse.Namespace) -> int:
        """Handle keygen command."""
        signer = EcdsaSigner.generate()

        if args.out:
            path = Path(args.out)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(signer.to_pem())
            path.chmod(0o600)
            print(f"Private key written to {path}")
            logger.info(f"Generated signer key at {path}")
        else:
            print(signer.to_pem().decode("ascii"), end="")

        print(f"Signer ID: {signer.signer_id}")
        return 0

    # =========================================================================
    # Output Helpers
    # =========================================================================

    def _print_events(self, events: List[Dict[str, Any]]) -> None:
        """Print event table."""
        print("\n=== Fund Events ===")
        print(f"{'Seq':>6} {'Block':>10} {'Event':<30} Data")
        print("-" * 80)

        for event in events:
            data = ", ".join(f"{k}={v}" for k, v in sorted(event["data"].items()))
            print(f"{event['sequence']:>6} {event['block_number']:>10} {event['name']:<30} {data}")

    def _print_capital(self, summaries: List[CapitalSummary]) -> None:
        """Print capital summary table."""
        print("\n=== Invested Capital ===")
        print(
            f"{'Account':<44} {'Deposited':>14} {'Withdrawn':>14} "
            f"{'In':>12} {'Out':>12} {'Net':>14}"
        )
        print("-" * 115)

        for s in sorted(summaries, key=lambda s: s.account):
            print(
                f"{s.account:<44} {s.deposited:>14} {s.withdrawn:>14} "
                f"{s.transferred_in:>12} {s.transferred_out:>12} {s.net_capital:>14}"
            )


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    if args is None:
        args = sys.argv[1:]

    cli = FundVaultCLI()
    return cli.run(args)


if __name__ == "__main__":
    sys.exit(main())
