"""
Discount endpoints.

Prices a single transaction, or ingests and persists an uploaded CSV batch.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from discount_engine.api.dependencies import get_app_settings, get_order_repository, get_trace_logger
from discount_engine.api.schemas import (
    BatchResponse,
    DiscountResponse,
    OrderResponse,
    SkippedRowResponse,
    TransactionRequest,
)
from discount_engine.config import Settings
from discount_engine.domain.rules import evaluate, rule_breakdown
from discount_engine.infrastructure.database import OrderRepository
from discount_engine.services.ingestion import (
    InvalidRowPolicy,
    TransactionParseError,
    read_transactions_text,
)
from discount_engine.services.processing import process_transactions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discounts", tags=["discounts"])


@router.post("/evaluate", response_model=DiscountResponse)
async def evaluate_transaction(request: TransactionRequest) -> DiscountResponse:
    """
    Price a single transaction.

    Nothing is persisted. The response lists every rule's contribution
    next to the selected discount.
    """
    tx = request.to_domain()
    result = evaluate(tx)

    return DiscountResponse(
        product_name=tx.product_name,
        discount_percent=result.discount_percent,
        final_price=result.final_price,
        rules=rule_breakdown(tx),
    )


@router.post(
    "/batch",
    response_model=BatchResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Empty or undecodable file"},
        422: {"description": "Not a CSV file, or malformed row under the abort policy"},
    },
)
async def process_batch(
    file: Annotated[UploadFile, File(description="Transactions CSV with header row")],
    repository: Annotated[OrderRepository, Depends(get_order_repository)],
    trace: Annotated[logging.Logger, Depends(get_trace_logger)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    on_invalid_row: Annotated[InvalidRowPolicy | None, Query()] = None,
) -> BatchResponse:
    """
    Upload a transactions CSV, price every row and store the orders.

    **Process:**
    1. Parse rows (malformed rows abort or are skipped, per `on_invalid_row`)
    2. Evaluate discounts
    3. Write one trace line per transaction
    4. Persist all orders in one database transaction
    """
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Only CSV files are supported",
        )

    raw = await file.read()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is empty",
        )

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File is not valid UTF-8: {e}",
        )

    policy = on_invalid_row or InvalidRowPolicy(settings.on_invalid_row)

    try:
        report = read_transactions_text(text, policy)
    except TransactionParseError as e:
        logger.warning(f"Rejected batch {file.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    records = await process_transactions(report.transactions, repository, trace)

    return BatchResponse(
        processed=len(records),
        skipped=[
            SkippedRowResponse(row_number=err.row_number, line=err.line, reason=err.reason)
            for err in report.errors
        ],
        orders=[OrderResponse.from_record(r) for r in records],
    )
