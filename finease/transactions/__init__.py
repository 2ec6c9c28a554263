"""
Transactions Module

Transaction schemas, the ownership guard and the CRUD service.
"""

from .models import TransactionCreate, TransactionType, TransactionUpdate
from .ownership import OwnershipGuard, ensure_owner
from .service import TransactionService

__all__ = [
    "OwnershipGuard",
    "TransactionCreate",
    "TransactionService",
    "TransactionType",
    "TransactionUpdate",
    "ensure_owner",
]
