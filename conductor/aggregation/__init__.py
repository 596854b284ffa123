"""
CONDUCTOR Aggregation — Merges worker outcomes into one result.
"""

from .aggregator import MULTIPLE_PERSPECTIVES, NEXT_STEPS, AggregatedResult, ResultAggregator

__all__ = [
    "ResultAggregator",
    "AggregatedResult",
    "MULTIPLE_PERSPECTIVES",
    "NEXT_STEPS",
]
