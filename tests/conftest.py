"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database shared between the
fixtures and the API's request sessions (StaticPool keeps one connection).
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.database import get_session
from app.main import app
from app.models.domain_models import UserRole
from app.storage.local import LocalBlobStore
from app.storage.uploads import get_blob_store
from app.store.sql_store import SQLRecordStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session) -> SQLRecordStore:
    return SQLRecordStore(session)


# ============================================================================
# Users
# ============================================================================


@pytest.fixture
def admin_user(store):
    return store.insert(
        "users", {"email": "admin@example.com", "name": "Admin User", "role": UserRole.ADMIN}
    )


@pytest.fixture
def staff_user(store):
    return store.insert(
        "users", {"email": "staff@example.com", "name": "Staff User", "role": UserRole.USER}
    )


@pytest.fixture
def client_user(store):
    return store.insert(
        "users", {"email": "client@example.com", "name": "Client One", "role": UserRole.CLIENT}
    )


@pytest.fixture
def other_client_user(store):
    return store.insert(
        "users", {"email": "client2@example.com", "name": "Client Two", "role": UserRole.CLIENT}
    )


# ============================================================================
# Customers
# ============================================================================


@pytest.fixture
def acme(store):
    return store.insert(
        "customers",
        {"name": "Acme Corp", "contact_name": "Jane Doe", "email": "jane@acme.test"},
    )


@pytest.fixture
def globex(store):
    return store.insert(
        "customers",
        {"name": "Globex", "contact_name": "Hank Scorpio", "email": "hank@globex.test"},
    )


# ============================================================================
# API
# ============================================================================


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(str(tmp_path / "blobs"))


@pytest.fixture
def api(session, blob_store):
    """TestClient sharing the fixtures' session and a temp-dir blob store."""
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()


