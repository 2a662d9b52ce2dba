"""
Shared pytest fixtures for the Vinscan test suite.

Uses FastAPI TestClient with an isolated in-memory database per test so
tests never touch the real database and balances never leak between tests.
"""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from vinscan.database import Base, get_db
from vinscan.main import app

# Import all models so Base.metadata knows about them
from vinscan.models.user import User       # noqa: F401
from vinscan.models.asset import Asset     # noqa: F401
from vinscan.models.record import Record   # noqa: F401

LOGIN_CREDS = {"email": "admin@example.com", "password": "password"}
OTHER_CREDS = {"email": "other@example.com", "password": "password"}


@pytest.fixture
def test_engine():
    """Fresh in-memory SQLite database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture
def client(session_factory):
    """TestClient whose requests use the isolated database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db(session_factory):
    """Direct SQLAlchemy session for service-level tests."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def owner(db):
    """A user created straight in the database, for service-level tests."""
    user = User(email="owner@example.com")
    user.set_password("password")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def register_and_login(client, creds):
    r = client.post("/api/v1/register", json=creds)
    assert r.status_code == 201, f"register failed: {r.status_code} {r.text}"
    r = client.post("/api/v1/login", json=creds)
    assert r.status_code == 200, f"login failed: {r.status_code} {r.text}"
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    """Bearer headers of a freshly registered user."""
    return register_and_login(client, LOGIN_CREDS)


@pytest.fixture
def other_headers(client):
    """Bearer headers of a second, unrelated user."""
    return register_and_login(client, OTHER_CREDS)


@pytest.fixture
def make_asset(client, auth_headers):
    """Create an asset over the API and return its id."""

    def _make(subcategory="BCA", amount=100, category="Bank", headers=None):
        r = client.post(
            "/api/v1/assets",
            json={"category": category, "subcategory": subcategory, "amount": amount},
            headers=headers or auth_headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["id"]

    return _make


@pytest.fixture
def balance(client, auth_headers):
    """Read an asset's current balance as Decimal."""

    def _balance(asset_id, headers=None):
        r = client.get(f"/api/v1/assets/{asset_id}", headers=headers or auth_headers)
        assert r.status_code == 200, r.text
        return Decimal(str(r.json()["amount"]))

    return _balance
