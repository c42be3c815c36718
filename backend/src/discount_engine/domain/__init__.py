"""
Domain package - Core business logic with no external dependencies.

This package contains pure Python domain models and the discount rules
that price a retail transaction.
"""

from .models import DiscountResult, OrderRecord, Transaction
from .rules import evaluate, rule_breakdown

__all__ = ["DiscountResult", "OrderRecord", "Transaction", "evaluate", "rule_breakdown"]
