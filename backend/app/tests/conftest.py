"""
Shared fixtures: in-memory database, API client and authenticated users.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app import models  # noqa: F401
from app.db.base import Base
from app.db.session import get_db
from app.main import app


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """API client bound to the test database."""
    def override_get_db():
        yield db_session
    
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, password: str = "secret123", **names) -> dict:
    """Sign up and log in; returns Authorization headers."""
    response = client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, **names}
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client, "alice@example.com", first_name="Alice")


@pytest.fixture
def other_headers(client):
    return register(client, "bob@example.com", first_name="Bob")


@pytest.fixture
def group_id(client, auth_headers):
    """Shared group owned by the first user."""
    response = client.post("/api/groups", json={"name": "Home Budget"}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]
