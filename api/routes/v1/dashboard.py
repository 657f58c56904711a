"""Dashboard endpoints."""

import uuid
from fastapi import APIRouter, Depends

from api.dependencies import get_dashboard_service, require_authenticated_user
from api.schemas.dashboard import UserDashboard, TeamDashboard
from api.services import DashboardService
from database.models import User

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/user", response_model=UserDashboard, summary="User Dashboard")
async def get_user_dashboard(
    current_user: User = Depends(require_authenticated_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Counts, recent teams and recent invitations for the signed-in user."""
    dashboard = await service.get_user_dashboard(current_user.id)
    return UserDashboard.model_validate(dashboard)


@router.get("/team/{team_id}", response_model=TeamDashboard, summary="Team Dashboard")
async def get_team_dashboard(
    team_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Team statistics, members, invitations and projects. Members only."""
    dashboard = await service.get_team_dashboard(team_id, current_user.id)
    return TeamDashboard.model_validate(dashboard)
