"""Test data and doubles shared across test modules."""

from dataclasses import replace
from datetime import date

from discount_engine.domain.models import OrderRecord, Transaction


BASE_TRANSACTION = Transaction(
    occurred_on=date(2025, 1, 10),
    product_name="Apple Juice",
    expiry_date=date(2025, 6, 1),
    quantity=1,
    unit_price=10.0,
    via_app=False,
    payment_method="cash",
)

SCENARIO_TRANSACTION = Transaction(
    occurred_on=date(2025, 3, 23),
    product_name="Cheddar Cheese",
    expiry_date=date(2025, 4, 1),
    quantity=8,
    unit_price=50.0,
    via_app=True,
    payment_method="visa",
)

SAMPLE_CSV = (
    "timestamp,productName,expiryDate,quantity,unitPrice,viaApp,paymentMethod\n"
    "2025-03-23T10:15:00Z,Cheddar Cheese,2025-04-01,8,50.0,true,Visa\n"
    "2023-04-18T18:18:40Z,Wine - White - Concha Y Toro,2023-06-01,11,104.4,FALSE,Cash\n"
    "2023-01-05,Apple Juice,2023-12-31,1,3.5,false,cash\n"
)


def make_transaction(**overrides) -> Transaction:
    """A transaction no rule applies to, with the given fields replaced."""
    return replace(BASE_TRANSACTION, **overrides)


class FakeOrderRepository:
    """In-memory stand-in for OrderRepository."""

    def __init__(self) -> None:
        self.records: list[OrderRecord] = []
        self.commits = 0

    async def add(self, record: OrderRecord) -> None:
        self.records.append(record)

    async def add_many(self, records) -> None:
        self.records.extend(records)

    async def commit(self) -> None:
        self.commits += 1
