"""
Ownership Guard

Every owner-scoped operation goes through this module: a caller may only
read or mutate records whose owner email equals their verified identity.
"""

import logging
from typing import TYPE_CHECKING, Any

from ..errors import Forbidden, NotFound

if TYPE_CHECKING:
    from ..api.database import RecordStore

logger = logging.getLogger(__name__)


def ensure_owner(caller: str, owner: str | None) -> None:
    """Raise Forbidden unless the caller is the owner (exact match)."""
    if owner is None or caller != owner:
        logger.warning(f"Ownership check failed for {caller}")
        raise Forbidden()


class OwnershipGuard:
    """Loads records by identifier on behalf of a caller."""

    def __init__(self, store: "RecordStore"):
        self.store = store

    def load(self, record_id: str, caller: str) -> dict[str, Any]:
        """Fetch a record and enforce ownership.

        Existence is checked before ownership, so a missing record is
        NotFound for every caller.

        Args:
            record_id: Record identifier
            caller: Verified caller email

        Returns:
            The stored record

        Raises:
            NotFound: If no record has this identifier
            Forbidden: If the caller does not own the record
        """
        record = self.store.find_one(record_id)

        if record is None:
            raise NotFound()

        ensure_owner(caller, record.get("email"))
        return record
