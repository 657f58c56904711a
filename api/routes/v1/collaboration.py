"""Collaboration lookups between the signed-in user and another user."""

import uuid
from fastapi import APIRouter, Depends

from api.dependencies import get_collaboration_service, require_authenticated_user
from api.schemas.portfolios import CollaborationContext
from api.schemas.teams import TeamSummary, ProjectResponse
from api.services import CollaborationService
from database.models import User

router = APIRouter(prefix="/collaboration", tags=["collaboration"])


@router.get("/teams/{user_id}", response_model=list[TeamSummary], summary="Shared Teams")
async def get_shared_teams(
    user_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: CollaborationService = Depends(get_collaboration_service),
):
    teams = await service.get_shared_teams(current_user.id, user_id)
    return [TeamSummary.model_validate(t) for t in teams]


@router.get("/projects/{user_id}", response_model=list[ProjectResponse], summary="Shared Projects")
async def get_shared_projects(
    user_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: CollaborationService = Depends(get_collaboration_service),
):
    projects = await service.get_shared_projects(current_user.id, user_id)
    return [ProjectResponse.model_validate(p) for p in projects]


@router.get(
    "/context/{user_id}",
    response_model=CollaborationContext,
    summary="Collaboration Context",
    description="Whether the signed-in user worked with another user, and where.",
)
async def get_collaboration_context(
    user_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: CollaborationService = Depends(get_collaboration_service),
):
    context = await service.get_collaboration_context(current_user.id, user_id)
    return CollaborationContext.model_validate(context)
