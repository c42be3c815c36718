"""
Domain models for retail discount evaluation.

Design Decisions:
- Frozen dataclasses: a transaction is built once from input and never mutated
- Prices and percentages are floats; the evaluator contract is (float, float)
- OrderRecord is the flat shape handed to persistence and logging
"""

from dataclasses import astuple, dataclass
from datetime import date
from typing import Iterator


@dataclass(frozen=True)
class Transaction:
    """
    A single retail purchase.

    No field is validated here. Negative quantities or prices flow through
    the discount arithmetic unchanged; rejecting them is the job of the
    ingestion layer.
    """
    occurred_on: date
    product_name: str
    expiry_date: date
    quantity: int
    unit_price: float
    via_app: bool
    payment_method: str

    @property
    def days_to_expiry(self) -> int:
        """Whole days between the purchase and the product's expiry."""
        return (self.expiry_date - self.occurred_on).days

    @property
    def gross_price(self) -> float:
        """Price before any discount."""
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class DiscountResult:
    """Outcome of evaluating one transaction."""
    discount_percent: float
    final_price: float

    def __iter__(self) -> Iterator[float]:
        # Allows `discount, price = evaluate(tx)`
        return iter(astuple(self))


@dataclass(frozen=True)
class OrderRecord:
    """
    Evaluated transaction, flattened for the orders table.

    Column order matches the table: order date, product, expiry,
    quantity, unit price, discount, final price.
    """
    order_date: date
    product_name: str
    expiry_date: date
    quantity: int
    unit_price: float
    discount: float
    final_price: float

    @classmethod
    def from_evaluation(cls, tx: Transaction, result: DiscountResult) -> "OrderRecord":
        return cls(
            order_date=tx.occurred_on,
            product_name=tx.product_name,
            expiry_date=tx.expiry_date,
            quantity=tx.quantity,
            unit_price=tx.unit_price,
            discount=result.discount_percent,
            final_price=result.final_price,
        )

    @property
    def trace_message(self) -> str:
        """Human-readable line for the append-only trace log."""
        return f"Applied discount {self.discount}% to {self.product_name}"

    @property
    def summary(self) -> str:
        """One-line console summary."""
        return f"{self.product_name}: Discount = {self.discount}%, Final Price = {self.final_price}"
