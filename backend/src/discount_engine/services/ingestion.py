"""
CSV ingestion of retail transactions.

Turns delimited text into typed Transaction objects:
- Dates: first 10 characters parsed as YYYY-MM-DD (time of day dropped)
- Quantities: integers
- Prices: decimal numbers
- Flags: case-insensitive "true", anything else is false

Design Decisions:
- The header row is always skipped, its content is not checked
- Fields are split on every comma; quotes get no special meaning
- Columns after the seventh are ignored
- Out-of-range values (negative quantity or price) are not errors here;
  they reach the evaluator unchanged
- Malformed rows either abort the whole read or are skipped and
  reported, chosen explicitly through InvalidRowPolicy
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Iterable

from discount_engine.domain.models import Transaction

logger = logging.getLogger(__name__)


CSV_COLUMNS = (
    "timestamp",
    "productName",
    "expiryDate",
    "quantity",
    "unitPrice",
    "viaApp",
    "paymentMethod",
)

DATE_FORMAT = "%Y-%m-%d"

# Plain split; quoting is not interpreted, so a comma always ends a field
DELIMITER = ","


class InvalidRowPolicy(str, Enum):
    """What to do with a row that cannot be parsed."""
    ABORT = "abort"
    SKIP = "skip"


class TransactionParseError(ValueError):
    """A CSV row could not be turned into a Transaction."""

    def __init__(self, row_number: int, line: str, reason: str) -> None:
        self.row_number = row_number
        self.line = line
        self.reason = reason
        super().__init__(f"Invalid CSV line {row_number}: {reason} ({line!r})")


@dataclass(frozen=True)
class RowError:
    """A rejected row, kept for reporting under the skip policy."""
    row_number: int
    line: str
    reason: str


@dataclass
class IngestionReport:
    """
    Result of reading a transactions file.

    Mutable because it is filled row by row.
    """
    transactions: list[Transaction] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def rows_read(self) -> int:
        return len(self.transactions) + len(self.errors)


def _parse_date(text: str, column: str) -> date:
    try:
        return datetime.strptime(text[:10], DATE_FORMAT).date()
    except ValueError:
        raise ValueError(f"{column} is not a YYYY-MM-DD date: {text!r}") from None


def _parse_int(text: str, column: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"{column} is not an integer: {text!r}") from None


def _parse_float(text: str, column: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{column} is not a number: {text!r}") from None


def parse_row(fields: list[str]) -> Transaction:
    """
    Build a Transaction from the fields of one CSV row.

    Raises:
        ValueError: If a field is missing or cannot be parsed
    """
    fields = [f.strip() for f in fields]
    if len(fields) < len(CSV_COLUMNS):
        raise ValueError(f"expected {len(CSV_COLUMNS)} columns, got {len(fields)}")

    timestamp, name, expiry, quantity, price, via_app, payment = fields[: len(CSV_COLUMNS)]

    return Transaction(
        occurred_on=_parse_date(timestamp, "timestamp"),
        product_name=name,
        expiry_date=_parse_date(expiry, "expiryDate"),
        quantity=_parse_int(quantity, "quantity"),
        unit_price=_parse_float(price, "unitPrice"),
        via_app=via_app.lower() == "true",
        payment_method=payment.lower(),
    )


def read_transactions(
    lines: Iterable[str],
    policy: InvalidRowPolicy = InvalidRowPolicy.ABORT,
) -> IngestionReport:
    """
    Parse CSV lines, header first, into transactions.

    Args:
        lines: Lines of the CSV document, including the header
        policy: ABORT raises on the first bad row, SKIP records it and moves on

    Returns:
        IngestionReport with parsed transactions in file order and
        any skipped rows

    Raises:
        TransactionParseError: On a malformed row under the ABORT policy
    """
    policy = InvalidRowPolicy(policy)
    report = IngestionReport()

    header_seen = False
    for row_number, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue
        if not header_seen:
            header_seen = True
            continue

        try:
            report.transactions.append(parse_row(line.split(DELIMITER)))
        except ValueError as e:
            if policy is InvalidRowPolicy.ABORT:
                raise TransactionParseError(row_number, line, str(e)) from e
            logger.warning(f"Skipping CSV line {row_number}: {e}")
            report.errors.append(RowError(row_number=row_number, line=line, reason=str(e)))

    logger.info(
        f"Read {len(report.transactions)} transactions "
        f"({len(report.errors)} rows skipped)"
    )
    return report


def read_transactions_text(
    text: str,
    policy: InvalidRowPolicy = InvalidRowPolicy.ABORT,
) -> IngestionReport:
    """Parse an in-memory CSV document."""
    return read_transactions(io.StringIO(text, newline=""), policy)


def read_transactions_file(
    path: Path,
    policy: InvalidRowPolicy = InvalidRowPolicy.ABORT,
) -> IngestionReport:
    """
    Parse a CSV file from disk.

    Raises:
        FileNotFoundError: If the file does not exist
        TransactionParseError: On a malformed row under the ABORT policy
    """
    if not path.exists():
        raise FileNotFoundError(f"Transactions file not found: {path}")

    with open(path, encoding="utf-8-sig", newline="") as f:
        return read_transactions(f, policy)
