"""
Batch processing orchestrator.

Coordinates the full pipeline for a batch of transactions:
1. Discount evaluation
2. Trace logging
3. Persistence of the evaluated orders

This is the primary interface for processing transaction files.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from discount_engine.domain.models import OrderRecord, Transaction
from discount_engine.domain.rules import evaluate, rule_breakdown
from discount_engine.infrastructure.database import Database, OrderRepository
from discount_engine.logging_config import trace_log

from .ingestion import IngestionReport, InvalidRowPolicy, read_transactions_file

logger = logging.getLogger(__name__)


def evaluate_transactions(
    transactions: Iterable[Transaction],
    trace: logging.Logger | None = None,
) -> list[OrderRecord]:
    """
    Evaluate every transaction, in order, into an order record.

    Writes one trace line and one console summary per transaction.
    """
    records: list[OrderRecord] = []
    for tx in transactions:
        result = evaluate(tx)
        record = OrderRecord.from_evaluation(tx, result)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Rule breakdown for {tx.product_name}: {rule_breakdown(tx)}")
        if trace is not None:
            trace.info(record.trace_message)
        logger.info(record.summary)

        records.append(record)
    return records


async def process_transactions(
    transactions: Iterable[Transaction],
    repository: OrderRepository,
    trace: logging.Logger | None = None,
) -> list[OrderRecord]:
    """
    Evaluate, trace and persist a batch of transactions.

    All orders of the batch are committed together; a database error
    leaves none of them stored.

    Args:
        transactions: Parsed transactions, processed in iteration order
        repository: Destination for the evaluated orders
        trace: Logger receiving one "Applied discount" line per transaction

    Returns:
        The evaluated order records, in input order
    """
    records = evaluate_transactions(transactions, trace)

    await repository.add_many(records)
    await repository.commit()

    logger.info(f"Persisted {len(records)} orders")
    return records


async def process_file(
    csv_path: Path,
    database: Database,
    trace_log_path: Path,
    policy: InvalidRowPolicy = InvalidRowPolicy.ABORT,
) -> tuple[IngestionReport, list[OrderRecord]]:
    """
    Run a transactions file end to end.

    Reads the CSV, creates the orders table if missing, and processes
    every parsed row. The trace file handler and the session are
    released on every exit path; the database is owned by the caller.

    Raises:
        FileNotFoundError: If the CSV file does not exist
        TransactionParseError: On a malformed row under the ABORT policy
    """
    report = read_transactions_file(csv_path, policy)

    await database.init_db()

    with trace_log(trace_log_path) as trace:
        async with database.session() as session:
            records = await process_transactions(
                report.transactions,
                OrderRepository(session),
                trace,
            )

    return report, records
