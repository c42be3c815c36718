"""
Command line interface for the discount engine.

Usage:
    discount-engine process transactions.csv
    discount-engine process transactions.csv --on-invalid-row skip
    discount-engine serve --port 8000
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from discount_engine.config import get_settings
from discount_engine.infrastructure.database import Database
from discount_engine.logging_config import configure_logging
from discount_engine.services.ingestion import InvalidRowPolicy, TransactionParseError
from discount_engine.services.processing import process_file

logger = logging.getLogger(__name__)


async def run_process(
    csv_path: Path,
    database_url: str,
    trace_log_path: Path,
    policy: InvalidRowPolicy,
) -> int:
    """Process a CSV file into the database. Returns the exit code."""
    database: Database | None = None
    try:
        database = Database(database_url)
        report, records = await process_file(csv_path, database, trace_log_path, policy)
    except (FileNotFoundError, TransactionParseError) as e:
        logger.error(f"Cannot read transactions: {e}")
        return 1
    except (SQLAlchemyError, ImportError, OSError) as e:
        logger.error(f"Database error: {e}")
        return 1
    finally:
        if database is not None:
            await database.close()

    logger.info(
        f"Processed {len(records)} transactions from {csv_path} "
        f"({len(report.errors)} rows skipped)"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discount-engine",
        description="Apply retail discount rules to transactions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process the default transactions file
  discount-engine process

  # Keep going past malformed rows
  discount-engine process data/transactions.csv --on-invalid-row skip

  # Run the HTTP API
  discount-engine serve --port 8000
        """,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from settings)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Price a CSV file and store the orders")
    process.add_argument(
        "csv_path",
        nargs="?",
        type=Path,
        default=None,
        help="Transactions CSV (default: TRANSACTIONS_PATH setting)",
    )
    process.add_argument(
        "--on-invalid-row",
        choices=[p.value for p in InvalidRowPolicy],
        default=None,
        help="abort on the first malformed row, or skip it and continue",
    )
    process.add_argument(
        "--trace-log",
        type=Path,
        default=None,
        help="Append-only trace log (default: TRACE_LOG_PATH setting)",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    configure_logging(args.log_level or settings.log_level)

    if args.command == "serve":
        import uvicorn

        uvicorn.run(
            "discount_engine.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return 0

    return asyncio.run(
        run_process(
            csv_path=args.csv_path or settings.transactions_path,
            database_url=settings.database_url,
            trace_log_path=args.trace_log or settings.trace_log_path,
            policy=InvalidRowPolicy(args.on_invalid_row or settings.on_invalid_row),
        )
    )


if __name__ == "__main__":
    sys.exit(main())
