#!/usr/bin/env python3
"""CLI script to create the broker plug-in tables in a store file.

Creates, in order:
- Trade (orders placed through the plug-in)
- TradeXref (links between related broker orders)
- TradeId (host engine trade id counter)
- Quote (last-price snapshots)
- LogRecord (persisted diagnostics)

Usage:
    python scripts/init_store.py --db Data/tda.db
    python scripts/init_store.py --db Data/tda.db --overwrite
    python scripts/init_store.py --dry-run --verbose
"""

import argparse
import logging
import sys

# Add parent directory to path for imports
sys.path.insert(0, ".")

from tradestore.core.config import settings
from tradestore.db import DataAccess, StoreConfig, describe
from tradestore.db import sql_builder
from tradestore.models import LogRecord, Quote, Trade, TradeId, TradeXref


RECORD_TYPES = [Trade, TradeXref, TradeId, Quote, LogRecord]


# =============================================================================
# Terminal Colors
# =============================================================================


class Colors:
    """Terminal color codes."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    END = "\033[0m"


def print_header(text: str) -> None:
    """Print a formatted header."""
    print(f"\n{Colors.BOLD}{'=' * 60}{Colors.END}")
    print(f"{Colors.BOLD}{text}{Colors.END}")
    print(f"{Colors.BOLD}{'=' * 60}{Colors.END}\n")


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}  [OK] {text}{Colors.END}")


def print_warning(text: str) -> None:
    print(f"{Colors.YELLOW}  [SKIP] {text}{Colors.END}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}  [ERROR] {text}{Colors.END}")


def print_info(text: str) -> None:
    print(f"{Colors.BLUE}  [INFO] {text}{Colors.END}")


# =============================================================================
# Table Creation
# =============================================================================


def init_tables(access: DataAccess, overwrite: bool = False, dry_run: bool = False) -> dict:
    """Create every plug-in table.

    Args:
        access: Store executor
        overwrite: Drop and recreate existing tables
        dry_run: Print the DDL instead of running it

    Returns:
        Dict with counts: created, skipped, failed
    """
    results = {"created": 0, "skipped": 0, "failed": 0}

    for record_type in RECORD_TYPES:
        name = describe(record_type).table_name

        if dry_run:
            print_info(f"{name} - would run: {sql_builder.create_table(describe(record_type)).sql}")
            results["created"] += 1
            continue

        if not overwrite and access.table_exists(record_type):
            print_warning(f"{name} - already exists")
            results["skipped"] += 1
            continue

        result = access.create_table(record_type, overwrite=overwrite)
        if result.success:
            print_success(f"{name} - created")
            results["created"] += 1
        else:
            print_error(f"{name} - failed: {result.error_msg}")
            results["failed"] += 1

    return results


# =============================================================================
# CLI
# =============================================================================


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Create the broker plug-in tables in a SQLite store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db",
        default=settings.TRADESTORE_DATABASE_PATH,
        help="Store file (default: TRADESTORE_DATABASE_PATH)",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Drop and recreate existing tables (deletes their rows)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the DDL without touching the store",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    print_header("Initializing Store")

    if not args.db and not args.dry_run:
        print_error("No store file given (use --db or set TRADESTORE_DATABASE_PATH)")
        return 1

    if args.dry_run:
        print_info("DRY RUN MODE - No changes will be made\n")
    else:
        print(f"Store file: {args.db}")
    print(f"Tables: {', '.join(describe(t).table_name for t in RECORD_TYPES)}")
    print()

    access = DataAccess(StoreConfig(database_path=args.db or "", echo=settings.DEBUG))
    results = init_tables(access, overwrite=args.overwrite, dry_run=args.dry_run)

    print_header("Summary")
    print(f"  Created: {results['created']}")
    print(f"  Skipped: {results['skipped']}")
    print(f"  Failed:  {results['failed']}")
    if not args.dry_run:
        print(f"  Size:    {access.get_db_size()} bytes")

    return 1 if results["failed"] > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
