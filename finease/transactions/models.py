"""
Transaction Models

Request schemas and the transaction type vocabulary.
"""

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Historical spellings still present in stored records
LEGACY_TYPE_ALIASES = {
    "expanse": "expense",
}

# Fields the reports depend on; everything else lives in the record's extras
CORE_FIELDS = ("amount", "type", "category", "date")


class TransactionType(str, Enum):
    """Transaction polarity."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def normalize(cls, value: Any) -> "TransactionType":
        """Map a raw type value (including legacy spellings) to a member.

        Args:
            value: Raw type value from a payload or a stored record

        Returns:
            TransactionType

        Raises:
            ValueError: If the value is not a known type
        """
        if isinstance(value, cls):
            return value

        raw = str(value).strip().lower()
        return cls(LEGACY_TYPE_ALIASES.get(raw, raw))


def canonical_type(value: str) -> str:
    """Canonical spelling of a stored type value. Unknown values pass through."""
    if isinstance(value, TransactionType):
        return value.value
    raw = str(value).strip().lower()
    return LEGACY_TYPE_ALIASES.get(raw, raw)


def _coerce_date(value: Any) -> Any:
    # ISO datetime strings from browser clients carry a time part
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class TransactionCreate(BaseModel):
    """Payload for creating a transaction."""

    model_config = ConfigDict(extra="allow")

    email: str | None = None
    amount: float = Field(gt=0)
    type: TransactionType
    category: str = Field(min_length=1)
    date: dt.date

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> TransactionType:
        return TransactionType.normalize(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_date(v)


class TransactionUpdate(BaseModel):
    """Partial payload for updating a transaction.

    Unset fields keep their stored values.
    """

    model_config = ConfigDict(extra="allow")

    email: str | None = None
    amount: float | None = Field(None, gt=0)
    type: TransactionType | None = None
    category: str | None = Field(None, min_length=1)
    date: dt.date | None = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> TransactionType | None:
        if v is None:
            return None
        return TransactionType.normalize(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_date(v)

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller supplied."""
        changes = self.model_dump(exclude_unset=True)
        changes.update(self.model_extra or {})
        return changes
