"""
Tests for authentication and profile endpoints.
"""
from app.core.security import create_access_token, decode_access_token, get_password_hash, verify_password


def test_signup(client):
    """Test user signup."""
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "Test@Example.com",
            "password": "testpassword123",
            "first_name": "Test"
        }
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "test@example.com"
    assert data["first_name"] == "Test"
    assert "hashed_password" not in data


def test_signup_creates_personal_group(client, auth_headers):
    """Every new user starts with a personal group they own."""
    response = client.get("/api/groups", headers=auth_headers)
    assert response.status_code == 200
    groups = response.json()
    assert len(groups) == 1
    assert groups[0]["is_personal"] is True
    assert groups[0]["name"] == "Personal"
    assert groups[0]["role"] == "owner"


def test_signup_duplicate_email(client, auth_headers):
    """Test signup with an email already in use."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "alice@example.com", "password": "another123"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Email already exists"}


def test_signup_invalid_payload(client):
    """Malformed bodies are 400 with an error message."""
    response = client.post("/api/auth/signup", json={"email": "not-an-email", "password": "secret123"})
    assert response.status_code == 400
    assert "error" in response.json()


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert "access_token" in response.json()


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={"email": "nonexistent@example.com", "password": "wrongpassword"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect email or password"}


def test_me_requires_credential(client):
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Missing authorization"}


def test_me_rejects_invalid_token(client):
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_update_profile(client, auth_headers):
    response = client.patch(
        "/api/users/me",
        json={"first_name": "  Alicia ", "last_name": "Smith"},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["first_name"] == "Alicia"
    assert response.json()["last_name"] == "Smith"
    assert response.json()["display_name"] == "Alicia Smith"


def test_password_hash_round_trip():
    hashed = get_password_hash("a" * 100)
    assert verify_password("a" * 100, hashed)
    assert not verify_password("b" * 100, hashed)


def test_access_token_claims():
    payload = decode_access_token(create_access_token(7, "user@example.com"))
    assert payload["user_id"] == 7
    assert payload["sub"] == "user@example.com"
    assert decode_access_token("garbage") is None
