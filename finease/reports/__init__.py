"""
Reports Module

Owner-scoped totals, category breakdowns and monthly series.
"""

from .aggregator import (
    MONTH_LABELS,
    CategorySlice,
    MonthlyBucket,
    ReportAggregator,
    TotalOverview,
)

__all__ = [
    "MONTH_LABELS",
    "CategorySlice",
    "MonthlyBucket",
    "ReportAggregator",
    "TotalOverview",
]
