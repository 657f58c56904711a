"""
Security utilities: password hashing, access tokens and invitation tokens.
"""

import secrets
import uuid
from datetime import timedelta
from typing import Optional, TypedDict

import bcrypt
import jwt

from core.config import settings
from core.utils.datetime import now


class JWTPayload(TypedDict):
    """Claims carried by access tokens."""

    sub: str
    type: str
    iat: int
    exp: int
    jti: str


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash stored for the account
        return False


def create_access_token(
    user_id: uuid.UUID | str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: Subject of the token
        secret_key: Signing key, defaults to JWT_SECRET_KEY
        algorithm: Signing algorithm, defaults to JWT_ALGORITHM
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    issued_at = now()
    expires = issued_at + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": int(issued_at.timestamp()),
        "exp": int(expires.timestamp()),
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(
        payload,
        secret_key or settings.jwt_secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def verify_jwt_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> JWTPayload:
    """
    Decode and validate an access token.

    Raises:
        jwt.ExpiredSignatureError: Token is past its expiry
        jwt.InvalidTokenError: Signature, structure or claims are invalid
    """
    payload = jwt.decode(
        token,
        secret_key or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Not an access token")
    return payload


def generate_invitation_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)
