"""
Discount rules for retail transactions.

This module contains pure functions that implement the pricing logic.
No side effects, no I/O - just business rules.

Every rule maps a Transaction to a discount percentage, 0.0 meaning the
rule does not apply. The evaluator keeps the two largest positive
percentages and averages them.

Design Decisions:
- Rules are total: they never raise on a well-typed transaction
- No clamping beyond the 0.0 floor; the rule caps keep the average
  well below 100%
- The quantity tier deliberately skips 15 (see quantity_discount)
"""

from collections.abc import Callable, Iterable

from .models import DiscountResult, Transaction


# Days-to-expiry window in which each remaining day below the limit is worth 1%
EXPIRY_WINDOW_DAYS = 30

# Discount granted on the promotional day (month, day)
SPECIAL_DATE = (3, 23)
SPECIAL_DATE_DISCOUNT = 50.0

VISA_DISCOUNT = 5.0

# Checked in order; first substring match wins
PRODUCT_DISCOUNTS: tuple[tuple[str, float], ...] = (
    ("cheese", 10.0),
    ("wine", 5.0),
)

# App purchases are bucketed by quantity rounded up to this step
APP_QUANTITY_STEP = 5


def expiry_discount(tx: Transaction) -> float:
    """
    1% per day short of 30 days to expiry.

    Rule: 0 < days_remaining < 30 -> 30 - days_remaining

    Expiring on the purchase day, or already expired, gives nothing.
    """
    days_remaining = tx.days_to_expiry
    if 0 < days_remaining < EXPIRY_WINDOW_DAYS:
        return float(EXPIRY_WINDOW_DAYS - days_remaining)
    return 0.0


def product_type_discount(tx: Transaction) -> float:
    """10% for cheese, 5% for wine, matched case-insensitively anywhere in the name."""
    name = tx.product_name.lower()
    for keyword, discount in PRODUCT_DISCOUNTS:
        if keyword in name:
            return discount
    return 0.0


def special_date_discount(tx: Transaction) -> float:
    """50% on March 23rd of any year."""
    if (tx.occurred_on.month, tx.occurred_on.day) == SPECIAL_DATE:
        return SPECIAL_DATE_DISCOUNT
    return 0.0


def quantity_discount(tx: Transaction) -> float:
    """
    Bulk discount by units bought.

    - 6 to 9 units: 5%
    - 10 to 14 units: 7%
    - more than 15 units: 10%

    Exactly 15 units earns nothing. The gap is kept as-is and pinned by
    tests; changing it changes historical pricing.
    """
    q = tx.quantity
    if 6 <= q <= 9:
        return 5.0
    if 10 <= q <= 14:
        return 7.0
    if q > 15:
        return 10.0
    return 0.0


def app_discount(tx: Transaction) -> float:
    """
    Discount for purchases made through the mobile app.

    Quantity is rounded up to the next multiple of 5, then:
    up to 5 -> 5%, up to 10 -> 10%, up to 15 -> 15%, above that the
    rounded quantity itself (20 -> 20%, 25 -> 25%, ...).
    """
    if not tx.via_app:
        return 0.0

    step = APP_QUANTITY_STEP
    rounded = ((tx.quantity + step - 1) // step) * step

    if rounded <= 5:
        return 5.0
    if rounded <= 10:
        return 10.0
    if rounded <= 15:
        return 15.0
    return float(rounded)


def visa_discount(tx: Transaction) -> float:
    """5% when paid by Visa card."""
    if "visa" in tx.payment_method.lower():
        return VISA_DISCOUNT
    return 0.0


Rule = Callable[[Transaction], float]

# Evaluation order; also the key order of rule_breakdown()
RULES: tuple[tuple[str, Rule], ...] = (
    ("expiry", expiry_discount),
    ("product_type", product_type_discount),
    ("special_date", special_date_discount),
    ("quantity", quantity_discount),
    ("app", app_discount),
    ("visa", visa_discount),
)


def rule_breakdown(tx: Transaction) -> dict[str, float]:
    """Contribution of every rule, keyed by rule name."""
    return {name: rule(tx) for name, rule in RULES}


def select_best_discount(discounts: Iterable[float]) -> float:
    """
    Average of the two largest positive discounts.

    Falls back to the single positive value, or 0.0 when none apply.
    Only magnitude matters, so ties need no tie-breaking.
    """
    applicable = sorted((d for d in discounts if d > 0), reverse=True)

    if len(applicable) >= 2:
        return (applicable[0] + applicable[1]) / 2
    if applicable:
        return applicable[0]
    return 0.0


def calculate_best_discount(tx: Transaction) -> float:
    """Run every rule against the transaction and select the discount."""
    return select_best_discount(rule(tx) for _, rule in RULES)


def calculate_final_price(tx: Transaction, discount: float) -> float:
    """
    Total price after discount.

    Rule: unit_price * quantity * (1 - discount / 100)

    Not floored at zero.
    """
    return tx.gross_price * (1 - discount / 100)


def evaluate(tx: Transaction) -> DiscountResult:
    """
    Evaluate a transaction.

    Args:
        tx: The purchase to price

    Returns:
        DiscountResult with the applied discount percentage and final price
    """
    discount = calculate_best_discount(tx)
    return DiscountResult(
        discount_percent=discount,
        final_price=calculate_final_price(tx, discount),
    )
