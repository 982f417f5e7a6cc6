import os

# Settings are read at import time, so they must be in place before househeroes is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "Testing"
os.environ.setdefault("ENTRA_ID_CLIENT_ID", "test-client-id")
os.environ.setdefault("ENTRA_ID_ISSUER", "https://login.example.test/test-tenant/v2.0")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from househeroes.core.security import IdentityClaims, get_current_claims
from househeroes.database import get_db
from househeroes.db_models import Base
from househeroes.main import app
from househeroes.repository import SQLHouseholdRepository
from househeroes.seed import seed_database

# One shared in-memory database per test; StaticPool keeps it alive across the TestClient thread
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; call ``advance`` to move time forward."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ClaimsOverride:
    """Stands in for token verification; set ``claims`` to sign a caller in."""

    def __init__(self):
        self.claims = None

    def sign_in(self, sub: str, email: str, given_name: str = "", family_name: str = "") -> IdentityClaims:
        self.claims = IdentityClaims(sub=sub, email=email, given_name=given_name, family_name=family_name)
        return self.claims

    async def __call__(self):
        return self.claims


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded_session(db_session):
    seed_database(db_session)
    return db_session


@pytest.fixture
def repo(db_session):
    return SQLHouseholdRepository(db_session)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth():
    return ClaimsOverride()


@pytest.fixture
def client(db_session, auth, monkeypatch):
    def override_get_db():
        yield db_session

    monkeypatch.setitem(app.dependency_overrides, get_db, override_get_db)
    monkeypatch.setitem(app.dependency_overrides, get_current_claims, auth)
    return TestClient(app)


def graphql(test_client, query: str, variables=None):
    response = test_client.post("/graphql", json={"query": query, "variables": variables or {}})
    assert response.status_code == 200, response.text
    return response.json()
