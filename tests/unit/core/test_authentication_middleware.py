"""
Tests for the authentication middleware.

The middleware only annotates the scope; endpoints decide whether a user is
required.
"""

import uuid
from datetime import timedelta

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from core.middleware.authentication import (
    AuthenticationMiddleware,
    get_auth_error,
    get_current_user_id,
)
from core.security import create_access_token


@pytest.fixture
def client():
    app = FastAPI()
    app.add_middleware(AuthenticationMiddleware)

    @app.get("/whoami")
    async def whoami(request: Request):
        user_id = get_current_user_id(request)
        return {
            "user_id": str(user_id) if user_id else None,
            "auth_error": get_auth_error(request),
        }

    @app.get("/health")
    async def health(request: Request):
        return {"user_id": request.scope.get("user_id")}

    return TestClient(app)


class TestAuthenticationMiddleware:
    """Test token resolution into the ASGI scope."""

    def test_anonymous_request_passes_through(self, client):
        response = client.get("/whoami")

        assert response.status_code == 200
        assert response.json() == {"user_id": None, "auth_error": None}

    def test_valid_token_sets_user_id(self, client):
        user_id = uuid.uuid4()
        token = create_access_token(user_id)

        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.json()["user_id"] == str(user_id)
        assert response.json()["auth_error"] is None

    def test_expired_token_sets_error(self, client):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(minutes=-1))

        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"user_id": None, "auth_error": "Token has expired"}

    def test_invalid_token_sets_error(self, client):
        response = client.get("/whoami", headers={"Authorization": "Bearer garbage"})

        assert response.json() == {"user_id": None, "auth_error": "Invalid token"}

    def test_non_uuid_subject_is_invalid(self, client):
        token = create_access_token("not-a-uuid")

        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.json()["auth_error"] == "Invalid token"

    def test_non_bearer_scheme_ignored(self, client):
        response = client.get("/whoami", headers={"Authorization": "Basic dXNlcjpwYXNz"})

        assert response.json() == {"user_id": None, "auth_error": None}

    def test_health_path_skipped(self, client):
        token = create_access_token(uuid.uuid4())

        response = client.get("/health", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {"user_id": None}
