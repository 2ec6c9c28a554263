"""
Record Store Module

Provides the transaction record store: a document-style table with a
pooled SQLAlchemy engine, CRUD helpers and grouped-sum aggregation.
"""

import logging
import os
import uuid
from datetime import date, datetime
from typing import Any, Generator

from fastapi import Request
from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    case,
    create_engine,
    delete,
    extract,
    func,
    insert,
    literal_column,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..errors import StoreUnavailable
from ..transactions.models import LEGACY_TYPE_ALIASES, TransactionType, canonical_type

logger = logging.getLogger(__name__)

# Database URL from environment
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg://{os.getenv('DB_USERNAME', 'finease')}:"
    f"{os.getenv('DB_PASSWORD', 'password')}@"
    f"{os.getenv('DB_HOST', 'localhost')}:"
    f"{os.getenv('DB_PORT', '5432')}/"
    f"{os.getenv('DB_NAME', 'finease')}"
)

metadata = MetaData()

transactions_table = Table(
    "transactions",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(36), nullable=False, unique=True),
    Column("email", String(320), nullable=False, index=True),
    Column("amount", Numeric(16, 2), nullable=False),
    Column("type", String(16), nullable=False),
    Column("category", String(128), nullable=False),
    Column("date", Date, nullable=False),
    Column("extra", JSON, nullable=False, default=dict),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

COLUMN_FIELDS = ("email", "amount", "type", "category", "date")

# Legacy spellings fold into their canonical type at query time. Literals keep
# the SELECT and GROUP BY renderings identical.
normalized_type = case(
    *[
        (transactions_table.c.type == literal_column(f"'{alias}'"), literal_column(f"'{canonical}'"))
        for alias, canonical in LEGACY_TYPE_ALIASES.items()
    ],
    else_=transactions_table.c.type,
)

GROUP_KEYS = {
    "type": normalized_type,
    "category": transactions_table.c.category,
    "month": extract("month", transactions_table.c.date),
    "year": extract("year", transactions_table.c.date),
}


class RecordStore:
    """Transaction record store backed by a pooled SQLAlchemy engine.

    One instance is created per process and shared by all requests.
    """

    def __init__(self, url: str = DATABASE_URL, **engine_options: Any):
        """Initialize the store.

        Args:
            url: SQLAlchemy database URL
            **engine_options: Extra options passed to create_engine
        """
        self.url = url
        self.engine_options = engine_options
        self.engine: Engine | None = None

    def connect(self) -> None:
        """Create the engine, bootstrap the schema and ping the database."""
        options: dict[str, Any] = {"pool_pre_ping": True}

        if self.url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url == "sqlite://":
                options["poolclass"] = StaticPool
        else:
            options.update(pool_size=5, max_overflow=10)

        options.update(self.engine_options)

        try:
            self.engine = create_engine(self.url, **options)
            metadata.create_all(self.engine)
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect to record store: {e}")
            raise StoreUnavailable() from e

        logger.info("Connected to record store")

    def close(self) -> None:
        """Dispose of pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.info("Record store connection closed")

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise StoreUnavailable("Record store is not connected")
        return self.engine

    def insert(self, document: dict[str, Any]) -> str:
        """Insert a document and return its new identifier.

        Args:
            document: Transaction fields; non-column fields go to extras

        Returns:
            Identifier assigned to the record
        """
        record_id = str(uuid.uuid4())
        now = datetime.now()
        values = _split_document(document)
        values.update(id=record_id, created_at=now, updated_at=now)

        try:
            with self._require_engine().begin() as conn:
                conn.execute(insert(transactions_table).values(**values))
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert transaction: {e}")
            raise StoreUnavailable() from e

        return record_id

    def find(self, email: str) -> list[dict[str, Any]]:
        """Return all records owned by an email, in insertion order."""
        query = (
            select(transactions_table)
            .where(transactions_table.c.email == email)
            .order_by(transactions_table.c.seq)
        )

        try:
            with self._require_engine().connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch transactions: {e}")
            raise StoreUnavailable() from e

        return [_row_to_document(row) for row in rows]

    def find_one(self, record_id: str) -> dict[str, Any] | None:
        """Return one record by identifier, or None if absent."""
        query = select(transactions_table).where(transactions_table.c.id == record_id)

        try:
            with self._require_engine().connect() as conn:
                row = conn.execute(query).mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch transaction {record_id}: {e}")
            raise StoreUnavailable() from e

        return _row_to_document(row) if row else None

    def update(self, record_id: str, fields: dict[str, Any]) -> int:
        """Merge fields onto a stored record.

        Args:
            record_id: Record identifier
            fields: Fields to replace; non-column fields merge into extras

        Returns:
            Number of records modified
        """
        values = {k: v for k, v in fields.items() if k in COLUMN_FIELDS}
        extras = {k: v for k, v in fields.items() if k not in COLUMN_FIELDS}

        if "type" in values:
            values["type"] = TransactionType.normalize(values["type"]).value

        try:
            with self._require_engine().begin() as conn:
                if extras:
                    current = conn.execute(
                        select(transactions_table.c.extra).where(transactions_table.c.id == record_id)
                    ).scalar_one_or_none()
                    values["extra"] = {**(current or {}), **_jsonable(extras)}

                result = conn.execute(
                    update(transactions_table)
                    .where(transactions_table.c.id == record_id)
                    .values(**values, updated_at=datetime.now())
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to update transaction {record_id}: {e}")
            raise StoreUnavailable() from e

        return result.rowcount

    def delete(self, record_id: str) -> int:
        """Delete a record. Returns the number of records removed."""
        try:
            with self._require_engine().begin() as conn:
                result = conn.execute(
                    delete(transactions_table).where(transactions_table.c.id == record_id)
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete transaction {record_id}: {e}")
            raise StoreUnavailable() from e

        return result.rowcount

    def aggregate(
        self,
        match: dict[str, Any],
        group_by: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Sum amounts over matching records, optionally grouped.

        Groups are returned in first-seen (insertion) order.

        Args:
            match: Equality filters keyed by column name or "year"/"month";
                "type" matches the normalized type
            group_by: Group keys: "type", "category", "month", "year"

        Returns:
            One dict per group with the group keys and "total"
        """
        group_by = group_by or []
        keys = [GROUP_KEYS[key].label(key) for key in group_by]
        total = func.coalesce(func.sum(transactions_table.c.amount), 0).label("total")

        query = select(*keys, total)

        for field, value in match.items():
            if field == "type":
                query = query.where(normalized_type == canonical_type(value))
            elif field in GROUP_KEYS:
                query = query.where(GROUP_KEYS[field] == value)
            else:
                query = query.where(transactions_table.c[field] == value)

        if group_by:
            query = query.group_by(*[GROUP_KEYS[key] for key in group_by]).order_by(
                func.min(transactions_table.c.seq)
            )

        try:
            with self._require_engine().connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Aggregation failed: {e}")
            raise StoreUnavailable() from e

        return [
            {**{key: row[key] for key in group_by}, "total": float(row["total"] or 0)}
            for row in rows
        ]


def _jsonable(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v.isoformat() if isinstance(v, (date, datetime)) else v for k, v in values.items()}


def _split_document(document: dict[str, Any]) -> dict[str, Any]:
    values = {k: v for k, v in document.items() if k in COLUMN_FIELDS}
    values["type"] = TransactionType.normalize(values["type"]).value
    values["extra"] = _jsonable(
        {k: v for k, v in document.items() if k not in COLUMN_FIELDS and k not in ("id", "_id")}
    )
    return values


def _row_to_document(row: Any) -> dict[str, Any]:
    document = dict(row["extra"] or {})
    document.update(
        id=row["id"],
        email=row["email"],
        amount=float(row["amount"]),
        type=canonical_type(row["type"]),
        category=row["category"],
        date=row["date"].isoformat(),
    )
    return document


def get_store(request: Request) -> Generator[RecordStore, None, None]:
    """Get the process-wide record store for FastAPI dependency injection.

    Yields:
        RecordStore
    """
    yield request.app.state.store
