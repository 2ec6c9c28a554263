"""
API Routes Package

Contains all route modules for the FinEase API.
"""

from .transactions import router as transactions_router
from .reports import router as reports_router

__all__ = [
    "transactions_router",
    "reports_router",
]
