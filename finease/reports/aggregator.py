"""
Report Aggregator Module

Rolls an owner's transactions into totals, category breakdowns and a
calendar-month series. All sums are computed by the record store.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..transactions.models import TransactionType

if TYPE_CHECKING:
    from ..api.database import RecordStore

logger = logging.getLogger(__name__)

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


@dataclass
class TotalOverview:
    """Income, expense and balance for one owner."""

    total_income: float = 0.0
    total_expense: float = 0.0

    @property
    def total_balance(self) -> float:
        return self.total_income - self.total_expense

    def to_dict(self) -> dict:
        return {
            "totalIncome": self.total_income,
            "totalExpense": self.total_expense,
            "totalBalance": self.total_balance,
        }


@dataclass
class CategorySlice:
    """Summed amount for one category, both types combined."""

    name: str
    value: float

    def to_dict(self) -> dict:
        return {"name": self.name, "value": self.value}


@dataclass
class MonthlyBucket:
    """Income and expense sums for one calendar month."""

    month: str
    income: float = 0.0
    expense: float = 0.0

    def to_dict(self) -> dict:
        return {"month": self.month, "income": self.income, "expense": self.expense}


class ReportAggregator:
    """Computes owner-scoped reports from the record store."""

    def __init__(self, store: "RecordStore"):
        self.store = store

    def category_total(self, owner: str, category: str, txn_type: str | TransactionType) -> float:
        """Sum of amounts for an owner's records with this category and type.

        Args:
            owner: Owner email
            category: Category label
            txn_type: Transaction type (legacy spellings accepted)

        Returns:
            Summed amount, 0 when nothing matches
        """
        rows = self.store.aggregate(
            {"email": owner, "category": category, "type": txn_type},
        )
        return rows[0]["total"] if rows else 0.0

    def total_overview(self, owner: str) -> TotalOverview:
        """Partition an owner's records by type and sum each side."""
        rows = self.store.aggregate({"email": owner}, group_by=["type"])

        overview = TotalOverview()
        for row in rows:
            if row["type"] == TransactionType.INCOME.value:
                overview.total_income += row["total"]
            elif row["type"] == TransactionType.EXPENSE.value:
                overview.total_expense += row["total"]

        return overview

    def category_breakdown(self, owner: str, year: int | None = None) -> list[CategorySlice]:
        """Per-category sums in first-seen order.

        Args:
            owner: Owner email
            year: Optional calendar year filter

        Returns:
            One CategorySlice per distinct category
        """
        rows = self.store.aggregate(self._match(owner, year), group_by=["category"])
        return [CategorySlice(name=row["category"], value=row["total"]) for row in rows]

    def monthly_series(self, owner: str, year: int | None = None) -> list[MonthlyBucket]:
        """Income and expense per calendar month, January first.

        Months are taken from each record's date regardless of year unless
        a year is given. Always returns twelve buckets.
        """
        buckets = [MonthlyBucket(month=label) for label in MONTH_LABELS]

        rows = self.store.aggregate(self._match(owner, year), group_by=["month", "type"])

        for row in rows:
            bucket = buckets[int(row["month"]) - 1]
            if row["type"] == TransactionType.INCOME.value:
                bucket.income += row["total"]
            elif row["type"] == TransactionType.EXPENSE.value:
                bucket.expense += row["total"]

        return buckets

    @staticmethod
    def _match(owner: str, year: int | None) -> dict:
        match: dict = {"email": owner}
        if year is not None:
            match["year"] = year
        return match
