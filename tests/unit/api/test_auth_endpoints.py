"""
Tests for authentication endpoints.

Tests:
- Registration
- Login
- Current user lookup
- Logout
- Error envelopes for bad credentials and tokens
"""

import uuid
from datetime import timedelta

import pytest

from core.security import create_access_token
from tests.helpers import register


@pytest.fixture
def signup_data():
    return {
        "email": "Ada@Acme.io",
        "password": "SecurePass123!",
        "name": "Ada King Lovelace",
        "username": "ada_l",
    }


class TestRegister:
    """Test the register endpoint."""

    @pytest.mark.asyncio
    async def test_register_success(self, client, signup_data):
        response = await client.post("/api/auth/register", json=signup_data)

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        user = data["user"]
        assert user["email"] == "ada@acme.io"
        assert user["first_name"] == "Ada"
        assert user["last_name"] == "King Lovelace"
        assert user["role"] == "FREELANCER"
        assert "password" not in user
        assert "password_hash" not in user

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, signup_data):
        await client.post("/api/auth/register", json=signup_data)

        response = await client.post(
            "/api/auth/register", json={**signup_data, "email": "ADA@acme.io", "username": "other"}
        )

        assert response.status_code == 409
        assert response.json() == {"error": "User already exists with this email", "code": "CONFLICT"}

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client, signup_data):
        await client.post("/api/auth/register", json=signup_data)

        response = await client.post(
            "/api/auth/register", json={**signup_data, "email": "someone@acme.io"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "Username already taken"

    @pytest.mark.asyncio
    async def test_invalid_username(self, client, signup_data):
        response = await client.post(
            "/api/auth/register", json={**signup_data, "username": "bad name!"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_short_password(self, client, signup_data):
        response = await client.post(
            "/api/auth/register", json={**signup_data, "password": "short"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "body.password"

    @pytest.mark.asyncio
    async def test_invalid_email(self, client, signup_data):
        response = await client.post(
            "/api/auth/register", json={**signup_data, "email": "not-an-email"}
        )

        assert response.status_code == 400


class TestLogin:
    """Test the login endpoint."""

    @pytest.mark.asyncio
    async def test_login_success(self, client):
        await register(client, "dev@acme.io", "dev")

        response = await client.post(
            "/api/auth/login", json={"email": "DEV@acme.io", "password": "password123"}
        )

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "dev"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        await register(client, "dev@acme.io", "dev")

        response = await client.post(
            "/api/auth/login", json={"email": "dev@acme.io", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials", "code": "UNAUTHORIZED"}
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_unknown_email_reads_the_same(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "ghost@acme.io", "password": "password123"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"


class TestCurrentUser:
    """Test /me and logout."""

    @pytest.mark.asyncio
    async def test_me(self, client):
        user, headers = await register(client, "dev@acme.io", "dev")

        response = await client.get("/api/auth/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == user["id"]

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "Authentication required"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_me_with_expired_token(self, client):
        user, _ = await register(client, "dev@acme.io", "dev")
        token = create_access_token(user["id"], expires_delta=timedelta(minutes=-5))

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "Token has expired"

    @pytest.mark.asyncio
    async def test_me_with_token_for_missing_user(self, client):
        token = create_access_token(uuid.uuid4())

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout(self, client):
        _, headers = await register(client, "dev@acme.io", "dev")

        response = await client.post("/api/auth/logout", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_ready(self, client):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}
