"""
Authentication middleware.

Reads the bearer token from the Authorization header, verifies it and places
the caller's identity in the ASGI scope:

- ``scope["user_id"]``: UUID of the authenticated user, when the token is valid
- ``scope["auth_error"]``: reason the token was rejected, when one was sent

The middleware never rejects a request itself. Public endpoints (team lookup,
token validation, job listings) accept anonymous callers, and protected
endpoints enforce authentication through ``require_authenticated_user``.
"""

import logging
import uuid
from typing import Callable, Optional

import jwt
from fastapi import Request

from core.security import verify_jwt_token

logger = logging.getLogger(__name__)

# Paths that never carry user context
SKIPPED_PREFIXES = ["/health", "/ready", "/docs", "/redoc", "/openapi"]


class AuthenticationError(Exception):
    """Base exception for authentication errors."""
    pass


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""
    pass


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""
    pass


class AuthenticationMiddleware:
    """
    Pure ASGI middleware that resolves the bearer token into a user id.
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: Optional[str] = None,
        jwt_algorithm: Optional[str] = None,
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        if any(request.url.path.startswith(prefix) for prefix in SKIPPED_PREFIXES):
            await self.app(scope, receive, send)
            return

        token = self._extract_token(request)
        if token:
            try:
                scope["user_id"] = self._authenticate(token)
            except TokenExpiredError:
                scope["auth_error"] = "Token has expired"
            except TokenInvalidError as e:
                logger.warning(f"Invalid token: {str(e)}")
                scope["auth_error"] = "Invalid token"

        await self.app(scope, receive, send)

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract JWT token from Authorization header.

        Args:
            request: FastAPI request

        Returns:
            JWT token or None
        """
        auth_header = request.headers.get("Authorization")

        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:]  # Remove "Bearer " prefix

        return None

    def _authenticate(self, token: str) -> uuid.UUID:
        try:
            payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(str(e))

        try:
            return uuid.UUID(payload["sub"])
        except ValueError:
            raise TokenInvalidError("Token subject is not a user id")


def get_current_user_id(request: Request) -> Optional[uuid.UUID]:
    """User id placed in the scope by the middleware, if any."""
    return request.scope.get("user_id")


def get_auth_error(request: Request) -> Optional[str]:
    return request.scope.get("auth_error")
