"""
In-app team invitation endpoints.

Invitations go to existing users and expire after a configured number of
days. Only the receiver can accept or decline; only the sender can cancel.
"""

import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_invitation_service, require_authenticated_user
from api.schemas.invitations import InvitationCreate, InvitationResponse
from api.services import InvitationService
from database.models import User, InvitationStatus

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post(
    "",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send Invitation",
    description="Invite an existing user to a team. Requires owner or admin of the team.",
)
async def send_invitation(
    request: InvitationCreate,
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    invitation = await invitation_service.send_invitation(
        current_user.id, request.team_id, request.receiver_id, request.role, request.message
    )
    return InvitationResponse.model_validate(invitation)


@router.get("/received", response_model=list[InvitationResponse], summary="Received Invitations")
async def list_received(
    status: Optional[InvitationStatus] = Query(None),
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    invitations = await invitation_service.get_received_invitations(current_user.id, status)
    return [InvitationResponse.model_validate(i) for i in invitations]


@router.get("/sent", response_model=list[InvitationResponse], summary="Sent Invitations")
async def list_sent(
    status: Optional[InvitationStatus] = Query(None),
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    invitations = await invitation_service.get_sent_invitations(current_user.id, status)
    return [InvitationResponse.model_validate(i) for i in invitations]


@router.get("/teams/{team_id}", response_model=list[InvitationResponse], summary="Team Invitations")
async def list_team_invitations(
    team_id: uuid.UUID,
    status: Optional[InvitationStatus] = Query(None),
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    """Invitations sent for a team. Requires owner or admin."""
    invitations = await invitation_service.get_team_invitations(team_id, current_user.id, status)
    return [InvitationResponse.model_validate(i) for i in invitations]


@router.get("/{invitation_id}", response_model=InvitationResponse, summary="Get Invitation")
async def get_invitation(
    invitation_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    invitation = await invitation_service.get_invitation(invitation_id, current_user.id)
    return InvitationResponse.model_validate(invitation)


@router.put("/{invitation_id}/accept", response_model=InvitationResponse, summary="Accept Invitation")
async def accept_invitation(
    invitation_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    """Accept and join the team with the invited role. Expired invitations return 410."""
    invitation = await invitation_service.accept_invitation(invitation_id, current_user.id)
    return InvitationResponse.model_validate(invitation)


@router.put("/{invitation_id}/decline", response_model=InvitationResponse, summary="Decline Invitation")
async def decline_invitation(
    invitation_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    invitation = await invitation_service.decline_invitation(invitation_id, current_user.id)
    return InvitationResponse.model_validate(invitation)


@router.delete("/{invitation_id}", response_model=InvitationResponse, summary="Cancel Invitation")
async def cancel_invitation(
    invitation_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    invitation = await invitation_service.cancel_invitation(invitation_id, current_user.id)
    return InvitationResponse.model_validate(invitation)
