#!/usr/bin/env python3
"""Apply overdue penalties to every active loan in a JSON ledger.

Reads the files written by ``generate_sample_data.py`` (or a previous run),
refreshes penalties as of ``--as-of`` (default: now) and writes the ledger
back. Running it twice for the same instant changes nothing the second time.
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hafta_ledger.config import LedgerConfig
from hafta_ledger.exceptions import LedgerError
from hafta_ledger.logging import get_logger, setup_logging
from hafta_ledger.sinks import JsonFileSink, load_store

logger = get_logger(__name__)


def parse_as_of(value: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def main() -> int:
    """Main entry point."""
    config = LedgerConfig.from_env()

    parser = argparse.ArgumentParser(description="Apply overdue penalties to a hafta ledger")
    parser.add_argument(
        "--ledger-dir",
        type=Path,
        default=config.output.json_output_dir,
        help="Directory holding users/loans/transactions JSON (default: OUTPUT_DIR or ./output)",
    )
    parser.add_argument(
        "--as-of",
        type=parse_as_of,
        default=None,
        help="ISO timestamp to evaluate penalties at (default: now, UTC)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing files",
    )
    parser.add_argument("--log-format", choices=["standard", "json"], default="standard")
    args = parser.parse_args()

    setup_logging(level=config.log_level, format_type=args.log_format)
    now = args.as_of or datetime.now(timezone.utc)

    try:
        store = load_store(args.ledger_dir)
        applied = store.refresh_penalties(now)
        summary = store.portfolio_summary(now)
    except LedgerError:
        logger.exception("Penalty refresh failed for %s", args.ledger_dir)
        return 1

    logger.info(
        "As of %s: %d loans penalised; %d borrowers, %s outstanding, %d overdue",
        now.isoformat(),
        applied,
        summary.borrowers,
        summary.total_outstanding,
        summary.overdue_count,
    )

    if args.dry_run:
        logger.info("Dry run: no files written")
        return 0

    sink = JsonFileSink(args.ledger_dir, pretty=config.output.pretty_json)
    sink.write_store(store)
    sink.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
