"""
Pytest configuration and fixtures for FinEase tests.
"""

import uuid
from datetime import date, datetime
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert

from finease.api.auth import StaticTokenVerifier, get_identity_verifier
from finease.api.database import RecordStore, get_store, transactions_table
from finease.api.main import app

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

ALICE = "alice@example.com"
BOB = "bob@example.com"


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def store() -> Generator[RecordStore, None, None]:
    """Return a connected in-memory record store."""
    store = RecordStore("sqlite:///:memory:")
    store.connect()
    yield store
    store.close()


@pytest.fixture
def tokens_file(tmp_path: Path) -> Path:
    """Write a development token map for two users."""
    path = tmp_path / "dev_tokens.yaml"
    path.write_text(f"""
tokens:
  - token: alice-token
    email: {ALICE}
    name: Alice
    uid: alice
  - token: bob-token
    email: {BOB}
    name: Bob
  - token: no-email-token
    name: Nobody
""")
    return path


@pytest.fixture
def verifier(tokens_file: Path) -> StaticTokenVerifier:
    """Return a static token verifier for alice and bob."""
    return StaticTokenVerifier(tokens_file)


@pytest.fixture
def client(store: RecordStore, verifier: StaticTokenVerifier) -> Generator[TestClient, None, None]:
    """Return a test client wired to the in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alice_headers() -> dict:
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def bob_headers() -> dict:
    return {"Authorization": "Bearer bob-token"}


@pytest.fixture
def sample_transaction() -> dict:
    """Return a sample transaction payload for alice."""
    return {
        "email": ALICE,
        "amount": 50.0,
        "type": "expense",
        "category": "Food",
        "date": "2025-01-15",
        "description": "Groceries",
    }


@pytest.fixture
def scenario_transactions() -> list[dict]:
    """Return alice's transactions for the reference report scenario."""
    return [
        {"email": ALICE, "category": "Food", "type": "expense", "amount": 50.0, "date": date(2025, 1, 10)},
        {"email": ALICE, "category": "Food", "type": "expanse", "amount": 20.0, "date": date(2025, 1, 20)},
        {"email": ALICE, "category": "Job", "type": "income", "amount": 200.0, "date": date(2025, 2, 1)},
    ]


def insert_raw(store: RecordStore, **fields) -> str:
    """Insert a row as stored by older clients, bypassing normalization."""
    record_id = str(uuid.uuid4())
    now = datetime.now()
    values = {"extra": {}, "created_at": now, "updated_at": now, **fields, "id": record_id}

    with store.engine.begin() as conn:
        conn.execute(insert(transactions_table).values(**values))

    return record_id


@pytest.fixture
def scenario_store(store: RecordStore, scenario_transactions: list[dict]) -> RecordStore:
    """Return a store seeded with the scenario, legacy spelling kept as stored."""
    for txn in scenario_transactions:
        insert_raw(store, **txn)
    return store


@pytest.fixture
def raw_insert(store: RecordStore):
    """Return a helper inserting legacy-shaped rows into the store."""
    return lambda **fields: insert_raw(store, **fields)
