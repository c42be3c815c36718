"""
Retail discount engine.

Evaluates six pricing rules per transaction, averages the two best
discounts and derives the final price.
"""

__version__ = "0.1.0"
