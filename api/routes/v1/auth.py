"""
Authentication endpoints.

Provides:
- Email/password registration and login
- Current user lookup
- Logout
"""

import logging
from fastapi import APIRouter, Depends, status

from api.dependencies import get_auth_service, require_authenticated_user
from api.schemas.common import MessageResponse
from api.schemas.users import RegisterRequest, LoginRequest, AuthResponse, UserResponse
from api.services import AuthService
from database.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new account.

    Returns the user and an access token. Emails and usernames are unique.
    """
    result = await auth_service.register(
        email=request.email,
        password=request.password,
        name=request.name,
        username=request.username,
        role=request.role,
    )
    return AuthResponse(user=UserResponse.model_validate(result["user"]), token=result["token"])


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login with email and password."""
    result = await auth_service.login(request.email, request.password)
    return AuthResponse(user=UserResponse.model_validate(result["user"]), token=result["token"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(require_authenticated_user)):
    """Get the signed-in user's account."""
    return UserResponse.model_validate(current_user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(require_authenticated_user)):
    """
    Logout the current user.

    Tokens are stateless; the client discards its copy.
    """
    logger.info(f"User logged out: {current_user.id}")
    return MessageResponse(message="Logged out successfully")
