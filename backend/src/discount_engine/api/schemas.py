"""
Pydantic schemas for API request/response validation.

These schemas define the contract between clients and the engine.
Request validation is the ingestion boundary: values rejected here never
reach the discount rules.
"""

from datetime import date

from pydantic import BaseModel, Field

from discount_engine.domain.models import OrderRecord, Transaction


# =============================================================================
# Request Schemas
# =============================================================================

class TransactionRequest(BaseModel):
    """A single transaction to price."""
    occurred_on: date = Field(..., description="Purchase date", examples=["2025-03-23"])
    product_name: str = Field(..., min_length=1, examples=["Cheddar Cheese"])
    expiry_date: date = Field(..., description="Product expiry date", examples=["2025-04-01"])
    quantity: int = Field(..., ge=0, examples=[8])
    unit_price: float = Field(..., ge=0, examples=[50.0])
    via_app: bool = Field(default=False, description="Bought through the mobile app")
    payment_method: str = Field(default="cash", examples=["visa"])

    def to_domain(self) -> Transaction:
        return Transaction(
            occurred_on=self.occurred_on,
            product_name=self.product_name,
            expiry_date=self.expiry_date,
            quantity=self.quantity,
            unit_price=self.unit_price,
            via_app=self.via_app,
            payment_method=self.payment_method,
        )


# =============================================================================
# Response Schemas
# =============================================================================

class DiscountResponse(BaseModel):
    """Evaluated discount for one transaction."""
    product_name: str
    discount_percent: float
    final_price: float
    rules: dict[str, float] = Field(
        default_factory=dict,
        description="Contribution of every rule, 0.0 when it does not apply",
    )


class RuleBreakdownResponse(BaseModel):
    """Per-rule contributions and the selected discount."""
    rules: dict[str, float]
    applicable: list[float]
    discount_percent: float


class OrderResponse(BaseModel):
    """A persisted order."""
    order_date: date
    product_name: str
    expiry_date: date
    quantity: int
    unit_price: float
    discount: float
    final_price: float

    @classmethod
    def from_record(cls, record: OrderRecord) -> "OrderResponse":
        return cls(
            order_date=record.order_date,
            product_name=record.product_name,
            expiry_date=record.expiry_date,
            quantity=record.quantity,
            unit_price=record.unit_price,
            discount=record.discount,
            final_price=record.final_price,
        )


class SkippedRowResponse(BaseModel):
    """A CSV row rejected under the skip policy."""
    row_number: int
    line: str
    reason: str


class BatchResponse(BaseModel):
    """Response from processing an uploaded CSV batch."""
    processed: int
    skipped: list[SkippedRowResponse] = []
    orders: list[OrderResponse] = []


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
