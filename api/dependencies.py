"""FastAPI dependencies for dependency injection."""

import uuid
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.integrations.email import EmailService
from core.middleware.authentication import (
    get_current_user_id as _scope_user_id,
    get_auth_error,
)
from database.engine import get_db
from database.models import User
from api.services import (
    AuthService,
    UserService,
    TeamService,
    InvitationService,
    EmailInvitationService,
    JobService,
    ApplicationService,
    PortfolioContributorService,
    RecommendationService,
    CollaborationService,
    DashboardService,
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(request: Request) -> Optional[uuid.UUID]:
    """
    Id of the authenticated caller, or None for anonymous requests.
    Set by the authentication middleware.
    """
    return _scope_user_id(request)


async def require_authenticated_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Require a valid bearer token belonging to an active user."""
    user_id = _scope_user_id(request)
    if user_id is None:
        raise _unauthorized(get_auth_error(request) or "Authentication required")

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("Authentication required")

    return user


def get_email_service() -> EmailService:
    return EmailService()


# ==================== Service providers ==================== #

def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_team_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> TeamService:
    return TeamService(db, email_service)


def get_invitation_service(db: AsyncSession = Depends(get_db)) -> InvitationService:
    return InvitationService(db)


def get_email_invitation_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> EmailInvitationService:
    return EmailInvitationService(db, email_service)


def get_job_service(db: AsyncSession = Depends(get_db)) -> JobService:
    return JobService(db)


def get_application_service(db: AsyncSession = Depends(get_db)) -> ApplicationService:
    return ApplicationService(db)


def get_portfolio_contributor_service(
    db: AsyncSession = Depends(get_db),
) -> PortfolioContributorService:
    return PortfolioContributorService(db)


def get_recommendation_service(db: AsyncSession = Depends(get_db)) -> RecommendationService:
    return RecommendationService(db)


def get_collaboration_service(db: AsyncSession = Depends(get_db)) -> CollaborationService:
    return CollaborationService(db)


def get_dashboard_service(db: AsyncSession = Depends(get_db)) -> DashboardService:
    return DashboardService(db)
