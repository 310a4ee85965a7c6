"""Shared pytest fixtures for all tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.database import create_tables, get_db, get_store
from app.main import app
from app.services.datastore import DataStore, StoreError, StoreErrorKind, TableState


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine with the upload_history table.

    StaticPool keeps a single connection so the ORM session and the store
    adapter see the same database.
    """
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = factory()
    yield session
    session.close()


@pytest.fixture
def store(engine):
    return DataStore(engine)


@pytest.fixture
def client(engine, monkeypatch):
    """API client against the test engine, with authentication off."""
    monkeypatch.setattr(settings, "AUTH_ENABLED", False)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store] = lambda: DataStore(engine)
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeStore:
    """Store double that records calls and fails chosen batches (1-based)."""

    def __init__(self, fail_batches=(), state=TableState.EXISTS, message="duplicate key value violates unique constraint"):
        self.fail_batches = set(fail_batches)
        self.state = state
        self.message = message
        self.calls = []
        self.inserted = []

    def table_state(self, table_name):
        self.calls.append(("table_state", table_name))
        return self.state

    def create_table(self, table_name, column_types):
        self.calls.append(("create_table", table_name))
        self.state = TableState.EXISTS

    def insert_rows(self, table_name, rows):
        self.calls.append(("insert_rows", table_name))
        batch_number = sum(1 for call in self.calls if call[0] == "insert_rows")
        if batch_number in self.fail_batches:
            raise StoreError(StoreErrorKind.CONSTRAINT_VIOLATION, self.message)
        self.inserted.append(list(rows))
        return len(rows)


@pytest.fixture
def fake_store():
    return FakeStore()


def make_csv(rows, header="order_id,product,quantity,price,paid"):
    """Build CSV bytes with ``rows`` generated data lines."""
    lines = [header]
    for i in range(1, rows + 1):
        lines.append(f"{i},Item {i},{i % 7},{i * 1.5:.2f},{'yes' if i % 2 else 'no'}")
    return ("\n".join(lines) + "\n").encode()
