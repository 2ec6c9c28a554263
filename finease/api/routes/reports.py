"""
Reports API Routes

Provides balance overview, category breakdown and monthly series for
the caller's transactions.
"""

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ...errors import FinEaseError, StoreUnavailable
from ...reports import ReportAggregator
from ..auth import User, get_current_user, require_owner_email
from ..database import RecordStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])


class OverviewResponse(BaseModel):
    """Income, expense and balance totals."""

    totalIncome: float
    totalExpense: float
    totalBalance: float


class CategoryItem(BaseModel):
    """Category breakdown entry."""

    name: str
    value: float


class MonthlyItem(BaseModel):
    """Monthly series entry."""

    month: str
    income: float
    expense: float


class ReportResponse(BaseModel):
    """Category breakdown and monthly series."""

    categoryData: list[CategoryItem]
    monthlyData: list[MonthlyItem]


def get_report_aggregator(store: RecordStore = Depends(get_store)) -> ReportAggregator:
    """Build the report aggregator over the shared store."""
    return ReportAggregator(store)


@router.get("/totalOverview", response_model=OverviewResponse)
async def get_total_overview(
    user: User = Depends(get_current_user),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
) -> OverviewResponse:
    """Get total income, total expense and balance for the caller.

    Args:
        user: Authenticated user
        aggregator: Report aggregator

    Returns:
        OverviewResponse
    """
    try:
        overview = aggregator.total_overview(user.email)
    except FinEaseError:
        raise
    except Exception as e:
        logger.error(f"Failed to compute overview: {e}")
        raise StoreUnavailable("Failed to fetch total overview") from e

    return OverviewResponse(**overview.to_dict())


@router.get("/reports", response_model=ReportResponse)
async def get_reports(
    email: str = Depends(require_owner_email),
    year: int | None = Query(None, ge=1900, le=9999, description="Limit to one calendar year"),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
) -> ReportResponse:
    """Get category breakdown and monthly income/expense series.

    Args:
        email: Owner email (must match the caller)
        year: Optional calendar year filter
        aggregator: Report aggregator

    Returns:
        ReportResponse
    """
    try:
        categories = aggregator.category_breakdown(email, year=year)
        months = aggregator.monthly_series(email, year=year)
    except FinEaseError:
        raise
    except Exception as e:
        logger.error(f"Failed to build report: {e}")
        raise StoreUnavailable("Failed to fetch reports") from e

    return ReportResponse(
        categoryData=[CategoryItem(**item.to_dict()) for item in categories],
        monthlyData=[MonthlyItem(**item.to_dict()) for item in months],
    )
