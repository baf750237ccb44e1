"""
Shared test fixtures.

Sets up an isolated SQLite test database so tests never touch
the real database. Tables are created before and dropped after
every test. Each API test also gets a fresh permission cache
reading from the test database.
"""

import os

# Set before any itam import so the app engine never points at PostgreSQL.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from itam.main import app
from itam.models.base import Base, get_db
from itam.models.enums import Role
from itam.models.module import ModuleDefinition
from itam.security import Identity, create_access_token
from itam.services.permission_service import (
    PermissionCache,
    PermissionStore,
    session_loader,
)


# A file rather than :memory: so that several connections (the
# permission cache loader, the concurrency tests) see the same data.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

ADMIN = Identity(user_id="1", username="admin", role=Role.ADMIN)
AUDITOR = Identity(user_id="2", username="auditor", role=Role.AUDITOR)
STAFF = Identity(user_id="3", username="staff", role=Role.STAFF)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def session_factory():
    return TestSessionLocal


@pytest.fixture
def permission_cache():
    return PermissionCache(loader=session_loader(TestSessionLocal), ttl_seconds=30)


@pytest.fixture
def client(db_session, permission_cache):
    """
    Provide a test client with the test database.

    get_db is overridden so the app uses our test session, and
    the app-wide permission cache is swapped for a fresh one.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    original_cache = app.state.permission_cache
    app.state.permission_cache = permission_cache
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.permission_cache = original_cache


def auth_headers(identity: Identity) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity)}"}


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN)


@pytest.fixture
def auditor_headers():
    return auth_headers(AUDITOR)


@pytest.fixture
def staff_headers():
    return auth_headers(STAFF)


@pytest.fixture
def create_module(db_session):
    """Factory for committed module definitions."""
    def _create(key="assets", name=None, actions=None, is_active=True):
        module = ModuleDefinition(
            key=key,
            name=name or key.title(),
            actions=actions or ["read", "create", "update", "delete", "assign", "status"],
            is_active=is_active,
        )
        db_session.add(module)
        db_session.commit()
        return module
    return _create


@pytest.fixture
def headers_for():
    """Headers for an arbitrary identity."""
    return auth_headers


@pytest.fixture
def grant_staff(db_session, permission_cache):
    """Store a staff grant and drop any cached copy of it."""
    def _grant(module_key, actions):
        PermissionStore(db_session).upsert(Role.STAFF, module_key, actions)
        db_session.commit()
        permission_cache.invalidate(module_key)
    return _grant
