"""
Transaction Service

Create, list, fetch, update and delete transactions for their owner.
"""

import logging
from typing import TYPE_CHECKING, Any

from ..errors import Forbidden, InvalidTransaction
from .models import CORE_FIELDS, TransactionType
from .ownership import OwnershipGuard, ensure_owner

if TYPE_CHECKING:
    from ..api.database import RecordStore
    from ..reports.aggregator import ReportAggregator

logger = logging.getLogger(__name__)


class TransactionService:
    """Owner-scoped CRUD over the record store."""

    def __init__(self, store: "RecordStore", aggregator: "ReportAggregator"):
        """Initialize the service.

        Args:
            store: Record store
            aggregator: Report aggregator used for the category total
        """
        self.store = store
        self.aggregator = aggregator
        self.guard = OwnershipGuard(store)

    def create(self, caller: str, payload: dict[str, Any]) -> str:
        """Persist a new transaction owned by the caller.

        Args:
            caller: Verified caller email
            payload: Transaction fields; payload email must equal caller

        Returns:
            Identifier of the created record
        """
        ensure_owner(caller, payload.get("email"))

        for field in CORE_FIELDS:
            if payload.get(field) is None:
                raise InvalidTransaction(f"Missing field: {field}")

        record_id = self.store.insert(payload)
        logger.info(f"Created transaction {record_id}")
        return record_id

    def list_for_owner(self, caller: str, email: str) -> list[dict[str, Any]]:
        """Return all of an owner's transactions."""
        ensure_owner(caller, email)
        return self.store.find(email)

    def get(self, caller: str, record_id: str) -> tuple[dict[str, Any], float]:
        """Fetch one transaction with its same category and type total.

        Returns:
            Tuple of (record, category total)
        """
        record = self.guard.load(record_id, caller)

        category_total = self.aggregator.category_total(
            owner=record["email"],
            category=record["category"],
            txn_type=record["type"],
        )

        return record, category_total

    def update(self, caller: str, record_id: str, changes: dict[str, Any]) -> int:
        """Merge supplied fields onto an owned transaction.

        The record identifier and owner email cannot be changed.

        Args:
            caller: Verified caller email
            record_id: Record identifier
            changes: Fields supplied by the caller

        Returns:
            Number of records modified
        """
        record = self.guard.load(record_id, caller)

        changes = dict(changes)
        changes.pop("id", None)
        changes.pop("_id", None)

        if "email" in changes:
            if changes.pop("email") != record["email"]:
                raise Forbidden("email cannot be changed")

        for field in CORE_FIELDS:
            if field in changes and changes[field] is None:
                raise InvalidTransaction(f"{field} cannot be null")

        if "type" in changes:
            changes["type"] = TransactionType.normalize(changes["type"]).value

        if not changes:
            return 0

        return self.store.update(record_id, changes)

    def delete(self, caller: str, record_id: str) -> int:
        """Delete an owned transaction. Returns the deleted count."""
        self.guard.load(record_id, caller)

        deleted = self.store.delete(record_id)
        logger.info(f"Deleted transaction {record_id}")
        return deleted
