"""
Services package - Ingestion and batch processing around the discount rules.
"""

from .ingestion import (
    IngestionReport,
    InvalidRowPolicy,
    TransactionParseError,
    read_transactions_file,
    read_transactions_text,
)
from .processing import evaluate_transactions, process_file, process_transactions

__all__ = [
    "IngestionReport",
    "InvalidRowPolicy",
    "TransactionParseError",
    "evaluate_transactions",
    "process_file",
    "process_transactions",
    "read_transactions_file",
    "read_transactions_text",
]
