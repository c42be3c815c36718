"""
Debug endpoints for development and testing.

These endpoints are only available when DEBUG=true.
"""

from fastapi import APIRouter

from discount_engine.api.schemas import RuleBreakdownResponse, TransactionRequest
from discount_engine.domain.rules import rule_breakdown, select_best_discount

router = APIRouter(prefix="/debug", tags=["debug"])


@router.post("/rules", response_model=RuleBreakdownResponse)
async def debug_rules(request: TransactionRequest) -> RuleBreakdownResponse:
    """
    Show how each rule scores a transaction.

    `applicable` holds the positive contributions, largest first; the
    discount is the mean of its first two entries.
    """
    rules = rule_breakdown(request.to_domain())
    applicable = sorted((v for v in rules.values() if v > 0), reverse=True)

    return RuleBreakdownResponse(
        rules=rules,
        applicable=applicable,
        discount_percent=select_best_discount(rules.values()),
    )
