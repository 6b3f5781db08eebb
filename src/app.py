"""
Stealth Wallet - One-time receiving addresses from a single master seed.

Command line entry point.

Usage:
    python app.py meta
    python app.py new --label "Invoice 42" [--amount 0.05 --asset SOL]
    python app.py list
    python app.py recover <address> <index> [--amount 0.1 --asset SOL]
    python app.py backup
    python app.py reset-counter --i-understand-reuse
    python app.py logs --lines 50

Amounts are checked against the stealth limits (the "limits" setting)
before an address is issued for a request or a key pair is handed out
for a sweep.

The store password is read from STEALTH_WALLET_PASSWORD, or prompted for.
"""

import argparse
import getpass
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from models.policy import StealthLimits, ASSET_SOL
from services.logging import (
    configure_logging,
    cleanup_old_logs,
    format_log_for_display,
    load_recent_logs,
)
from utils import get_store_path, load_settings
from wallet import (
    CounterResetRefused,
    KdfParams,
    StealthError,
    StealthWallet,
    StoreUnavailable,
    format_short,
)

PASSWORD_ENV = "STEALTH_WALLET_PASSWORD"

# Exit code when an amount exceeds the stealth limits
EXIT_LIMIT_EXCEEDED = 4

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stealth-wallet", description=__doc__.splitlines()[1])
    parser.add_argument("--store", type=Path, help="Path to the encrypted store file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("meta", help="Show the shareable meta-address")

    new = sub.add_parser("new", help="Issue a new one-time address")
    new.add_argument("--label", help="Name to remember the address by")
    new.add_argument("--amount", type=float, help="Amount the payment request asks for")
    new.add_argument("--asset", default=ASSET_SOL, help="Asset of --amount (default: SOL)")

    sub.add_parser("list", help="List every issued address")

    recover = sub.add_parser("recover", help="Check that an address/index pair belongs to this wallet")
    recover.add_argument("address")
    recover.add_argument("index", type=int)
    recover.add_argument("--amount", type=float, help="Amount about to be swept from the address")
    recover.add_argument("--asset", default=ASSET_SOL, help="Asset of --amount (default: SOL)")

    sub.add_parser("backup", help="Show the 24-word backup phrase")

    reset = sub.add_parser("reset-counter", help="Forget the address counter (testing only)")
    reset.add_argument("--i-understand-reuse", action="store_true", dest="acknowledge",
                       help="Confirm that earlier addresses will be handed out again")

    logs = sub.add_parser("logs", help="Show recent log lines")
    logs.add_argument("--lines", type=int, default=50, help="Number of lines (default: 50)")

    return parser


def get_password() -> str:
    """Store password from the environment, or an interactive prompt."""
    password = os.environ.get(PASSWORD_ENV)
    if password:
        return password
    return getpass.getpass("Store password: ")


def show_logs(max_lines: int) -> int:
    """Print recent persisted log lines, oldest first."""
    lines = load_recent_logs(max_lines)
    if not lines:
        print("No log entries (set log_retention_days to keep logs on disk)", file=sys.stderr)
        return 0
    for line in lines:
        print(format_log_for_display(line))
    return 0


def check_amount(allowed: bool, reason: str) -> bool:
    """Report a limit refusal. Returns True if the command may go on."""
    if not allowed:
        logger.warning(f"Stealth limit refused: {reason}")
        print(f"Refused: {reason}", file=sys.stderr)
    return allowed


def run(args: argparse.Namespace, settings: dict) -> int:
    """Execute one command. Returns the process exit code."""
    if args.command == "logs":
        return show_logs(args.lines)

    limits = StealthLimits.from_dict(settings.get("limits", {}))
    store_path = args.store or Path(settings.get("store_path") or get_store_path())
    kdf = KdfParams.from_dict(settings["kdf"]) if "kdf" in settings else None

    wallet = StealthWallet.open(store_path, get_password(), kdf)
    try:
        if args.command == "meta":
            meta = wallet.get_meta_address()
            print(meta.encode())
            print(f"({format_short(meta)})")

        elif args.command == "new":
            if args.amount is not None and not check_amount(*limits.check_request(args.asset, args.amount)):
                return EXIT_LIMIT_EXCEEDED
            addr = wallet.generate_address(args.label)
            print(f"#{addr.index}  {addr.address}")

        elif args.command == "list":
            for addr in wallet.list_addresses():
                print(f"#{addr.index}  {addr.address}")

        elif args.command == "recover":
            keypair = wallet.get_keypair(args.address, args.index)
            if keypair is None:
                print(f"Address not found at index {args.index}", file=sys.stderr)
                return 1
            if args.amount is not None and not check_amount(*limits.check_sweep(args.asset, args.amount)):
                return EXIT_LIMIT_EXCEEDED
            print(f"#{args.index}  {keypair.address}  (key pair recovered)")

        elif args.command == "backup":
            print(wallet.backup_phrase())

        elif args.command == "reset-counter":
            wallet.ledger.reset_counter(acknowledge_reuse=args.acknowledge)
            print("Address counter reset")
    finally:
        wallet.lock()

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)
    settings = load_settings()

    level = logging.DEBUG if args.verbose else getattr(logging, str(settings.get("log_level", "WARNING")).upper(), logging.WARNING)
    retention_days = settings.get("log_retention_days", 0)
    configure_logging(level, retention_days)
    if retention_days > 0:
        cleanup_old_logs(retention_days)

    try:
        return run(args, settings)
    except CounterResetRefused as e:
        print(f"Refused: {e}", file=sys.stderr)
        return 2
    except StoreUnavailable as e:
        logger.error(f"Secret store unavailable: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 3
    except (StealthError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
