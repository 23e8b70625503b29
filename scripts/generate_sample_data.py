#!/usr/bin/env python3
"""Generate a sample ledger and write it as JSON files.

The output directory can be fed to ``run_accrual.py``.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hafta_ledger.config import LedgerConfig
from hafta_ledger.logging import get_logger, setup_logging
from hafta_ledger.scenarios import LoanPortfolioScenario
from hafta_ledger.sinks import JsonFileSink

logger = get_logger(__name__)


def main() -> None:
    """Main entry point."""
    config = LedgerConfig.from_env()

    parser = argparse.ArgumentParser(description="Generate a sample hafta ledger")
    parser.add_argument(
        "--borrowers",
        type=int,
        default=10,
        help="Number of borrowers to generate (default: 10)",
    )
    parser.add_argument(
        "--overdue-rate",
        type=float,
        default=0.25,
        help="Share of loans already past due (default: 0.25)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed for reproducibility (default: SEED or 42)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.output.json_output_dir,
        help="Directory for the JSON files (default: OUTPUT_DIR or ./output)",
    )
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--log-format", choices=["standard", "json"], default="standard")
    args = parser.parse_args()

    setup_logging(level=config.log_level, format_type=args.log_format)

    store = LoanPortfolioScenario(
        num_borrowers=args.borrowers,
        overdue_rate=args.overdue_rate,
        seed=args.seed,
        locale=config.locale,
    ).generate()

    sink = JsonFileSink(args.output_dir, pretty=args.pretty or config.output.pretty_json)
    sink.write_store(store)
    sink.close()


if __name__ == "__main__":
    main()
