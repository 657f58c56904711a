"""
Team management endpoints.

Provides:
- Team CRUD, search and slug lookup
- Sub-teams under a main team
- Member management and role changes
- Suggested members and the unified invite
"""

import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_team_service, require_authenticated_user
from api.schemas.common import MessageResponse
from api.schemas.invitations import InviteMemberResponse
from api.schemas.teams import (
    TeamCreate,
    SubTeamCreate,
    TeamUpdate,
    TeamResponse,
    TeamSearchResponse,
    TeamListItem,
    MyTeamItem,
    TeamMemberResponse,
    AddMemberRequest,
    UpdateMemberRoleRequest,
    SuggestedMember,
    InviteMemberRequest,
    normalize_team_type,
)
from api.services import TeamService
from core.exceptions import ValidationError
from database.models import User

router = APIRouter(prefix="/teams", tags=["teams"])


# ==================== Teams ==================== #

@router.post(
    "",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Team",
    description="Create a main team. The creator becomes its OWNER.",
)
async def create_team(
    team: TeamCreate,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    created = await team_service.create_team(
        owner_id=current_user.id,
        name=team.name,
        description=team.description,
        team_type=team.type,
        avatar=team.avatar,
        city=team.city,
    )
    return TeamResponse.model_validate(created)


@router.get(
    "",
    response_model=TeamSearchResponse,
    summary="Search Teams",
    description="Search main teams by name or description, newest first.",
)
async def search_teams(
    search: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="Team type; legacy names are accepted"),
    city: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    team_service: TeamService = Depends(get_team_service),
):
    try:
        team_type = normalize_team_type(type) if type else None
    except ValueError as e:
        raise ValidationError(str(e))
    result = await team_service.search_teams(search, team_type, city, page, limit)
    return TeamSearchResponse.model_validate(result)


@router.get("/my-teams", response_model=list[MyTeamItem], summary="My Teams")
async def get_my_teams(
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    """Main teams the signed-in user belongs to, with their role."""
    teams = await team_service.get_user_teams(current_user.id)
    return [MyTeamItem.model_validate(t) for t in teams]


@router.get("/{identifier}", response_model=TeamResponse, summary="Get Team")
async def get_team(
    identifier: str,
    team_service: TeamService = Depends(get_team_service),
):
    """Fetch a team by id or slug."""
    team = await team_service.get_team(identifier)
    return TeamResponse.model_validate(team)


@router.put("/{team_id}", response_model=TeamResponse, summary="Update Team")
async def update_team(
    team_id: uuid.UUID,
    update: TeamUpdate,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    """Update team details. Owner only; a new name regenerates the slug."""
    team = await team_service.update_team(team_id, current_user.id, update.model_dump(exclude_unset=True))
    return TeamResponse.model_validate(team)


@router.delete("/{team_id}", response_model=MessageResponse, summary="Delete Team")
async def delete_team(
    team_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    await team_service.delete_team(team_id, current_user.id)
    return MessageResponse(message="Team deleted successfully")


# ==================== Sub-teams ==================== #

@router.post(
    "/{team_id}/sub-teams",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Sub-team",
    description="Create a sub-team under a main team. Requires owner or admin of the parent.",
)
async def create_sub_team(
    team_id: uuid.UUID,
    sub_team: SubTeamCreate,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    created = await team_service.create_sub_team(
        team_id,
        current_user.id,
        name=sub_team.name,
        description=sub_team.description,
        team_type=sub_team.type,
        avatar=sub_team.avatar,
        city=sub_team.city,
        sub_team_category=sub_team.sub_team_category,
    )
    return TeamResponse.model_validate(created)


@router.get("/{team_id}/sub-teams", response_model=list[TeamListItem], summary="List Sub-teams")
async def list_sub_teams(
    team_id: uuid.UUID,
    team_service: TeamService = Depends(get_team_service),
):
    sub_teams = await team_service.get_sub_teams(team_id)
    return [TeamListItem.model_validate(t) for t in sub_teams]


# ==================== Members ==================== #

@router.get("/{team_id}/members", response_model=list[TeamMemberResponse], summary="List Members")
async def list_members(
    team_id: uuid.UUID,
    team_service: TeamService = Depends(get_team_service),
):
    members = await team_service.get_team_members(team_id)
    return [TeamMemberResponse.model_validate(m) for m in members]


@router.post(
    "/{team_id}/members",
    response_model=TeamMemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Member",
)
async def add_member(
    team_id: uuid.UUID,
    request: AddMemberRequest,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    member = await team_service.add_team_member(team_id, current_user.id, request.user_id, request.role)
    return TeamMemberResponse.model_validate(member)


@router.delete("/{team_id}/members/{user_id}", response_model=MessageResponse, summary="Remove Member")
async def remove_member(
    team_id: uuid.UUID,
    user_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    await team_service.remove_team_member(team_id, current_user.id, user_id)
    return MessageResponse(message="Member removed successfully")


@router.put(
    "/{team_id}/members/{user_id}/role",
    response_model=TeamMemberResponse,
    summary="Update Member Role",
)
async def update_member_role(
    team_id: uuid.UUID,
    user_id: uuid.UUID,
    request: UpdateMemberRoleRequest,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    member = await team_service.update_member_role(team_id, current_user.id, user_id, request.role)
    return TeamMemberResponse.model_validate(member)


@router.post("/{team_id}/leave", response_model=MessageResponse, summary="Leave Team")
async def leave_team(
    team_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    await team_service.leave_team(team_id, current_user.id)
    return MessageResponse(message="You have left the team")


# ==================== Invites ==================== #

@router.get(
    "/{team_id}/suggested-members",
    response_model=list[SuggestedMember],
    summary="Suggested Members",
    description="Users whose skills and experience match the team. Members only.",
)
async def get_suggested_members(
    team_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    suggestions = await team_service.get_suggested_members(team_id, current_user.id)
    return [SuggestedMember.model_validate(s) for s in suggestions]


@router.post(
    "/{team_id}/invite",
    response_model=InviteMemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite Member",
    description=(
        "Invite by email or username. Same-company users are added directly, "
        "other users get an in-app invitation, unknown emails get an email invitation."
    ),
)
async def invite_member(
    team_id: uuid.UUID,
    request: InviteMemberRequest,
    current_user: User = Depends(require_authenticated_user),
    team_service: TeamService = Depends(get_team_service),
):
    result = await team_service.invite_member(
        team_id, current_user.id, request.identifier, request.role, request.message
    )
    return InviteMemberResponse.model_validate(result)
