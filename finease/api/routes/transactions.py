"""
Transactions API Routes

Provides owner-scoped endpoints for creating, viewing, updating and
deleting transactions.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from ...reports import ReportAggregator
from ...transactions import TransactionCreate, TransactionService, TransactionUpdate
from ..auth import User, get_current_user, require_owner_body, require_owner_email
from ..database import RecordStore, get_store

router = APIRouter(tags=["transactions"])


class InsertResult(BaseModel):
    """Store insert acknowledgment."""

    acknowledged: bool = True
    insertedId: str


class TransactionDetail(BaseModel):
    """Single transaction with its category total."""

    transaction: dict[str, Any]
    categoryTotal: float


class UpdateResult(BaseModel):
    """Update acknowledgment."""

    message: str
    modifiedCount: int


class DeleteResult(BaseModel):
    """Delete acknowledgment."""

    acknowledged: bool = True
    deletedCount: int
    message: str


def get_transaction_service(store: RecordStore = Depends(get_store)) -> TransactionService:
    """Build the transaction service over the shared store."""
    return TransactionService(store, ReportAggregator(store))


@router.post("/transactions", response_model=InsertResult, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionCreate,
    user: User = Depends(require_owner_body),
    service: TransactionService = Depends(get_transaction_service),
) -> InsertResult:
    """Create a transaction for the caller.

    Args:
        payload: Transaction fields; email must be the caller's
        user: Authenticated user
        service: Transaction service

    Returns:
        Insert acknowledgment with the new identifier
    """
    record_id = service.create(user.email, payload.model_dump())
    return InsertResult(insertedId=record_id)


@router.get("/my-transactions")
async def list_my_transactions(
    email: str = Depends(require_owner_email),
    user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> list[dict[str, Any]]:
    """List all transactions owned by the caller."""
    return service.list_for_owner(user.email, email)


@router.get("/transaction/{transaction_id}", response_model=TransactionDetail)
async def get_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionDetail:
    """Get a single transaction and the total of its category and type.

    Args:
        transaction_id: Transaction identifier
        user: Authenticated user
        service: Transaction service

    Returns:
        Transaction and category total
    """
    record, category_total = service.get(user.email, transaction_id)
    return TransactionDetail(transaction=record, categoryTotal=category_total)


@router.put("/transaction/{transaction_id}", response_model=UpdateResult)
async def update_transaction(
    transaction_id: str,
    payload: TransactionUpdate,
    user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> UpdateResult:
    """Update fields of a transaction. Unsupplied fields keep their values."""
    modified = service.update(user.email, transaction_id, payload.changes())
    return UpdateResult(message="Transaction updated successfully", modifiedCount=modified)


@router.delete("/transaction/{transaction_id}", response_model=DeleteResult)
async def delete_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service),
) -> DeleteResult:
    """Delete a transaction."""
    deleted = service.delete(user.email, transaction_id)
    return DeleteResult(deletedCount=deleted, message="Transaction deleted successfully")
