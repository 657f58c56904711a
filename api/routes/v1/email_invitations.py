"""
Email invitation endpoints.

Owners and admins invite people by company email. The recipient follows the
tokenized link, which can be validated without signing in and accepted once
signed in.
"""

import uuid
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_email_invitation_service, require_authenticated_user
from api.schemas.invitations import (
    EmailInvitationCreate,
    EmailInvitationResponse,
    TokenValidationResponse,
    EmailInvitationAcceptResponse,
    ExistingInvitationResponse,
)
from api.services import EmailInvitationService
from database.models import User

router = APIRouter(prefix="/email-invitations", tags=["email-invitations"])


@router.post(
    "/teams/{team_id}",
    response_model=EmailInvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send Email Invitation",
    description=(
        "Email an invitation link to a company address. Free email providers and "
        "domains that do not match the team's managers are rejected."
    ),
)
async def send_email_invitation(
    team_id: uuid.UUID,
    request: EmailInvitationCreate,
    current_user: User = Depends(require_authenticated_user),
    service: EmailInvitationService = Depends(get_email_invitation_service),
):
    invitation = await service.send_email_invitation(team_id, current_user.id, request.email, request.role)
    return EmailInvitationResponse.model_validate(invitation)


@router.get("/validate/{token}", response_model=TokenValidationResponse, summary="Validate Token")
async def validate_token(
    token: str,
    service: EmailInvitationService = Depends(get_email_invitation_service),
):
    """Check an invitation link. Does not require authentication."""
    invitation = await service.validate_invitation_token(token)
    return TokenValidationResponse(
        valid=True,
        invitation=EmailInvitationResponse.model_validate(invitation),
    )


@router.post("/accept/{token}", response_model=EmailInvitationAcceptResponse, summary="Accept Email Invitation")
async def accept_email_invitation(
    token: str,
    current_user: User = Depends(require_authenticated_user),
    service: EmailInvitationService = Depends(get_email_invitation_service),
):
    result = await service.accept_invitation(token, current_user.id)
    return EmailInvitationAcceptResponse.model_validate(result)


@router.delete("/{invitation_id}", response_model=EmailInvitationResponse, summary="Cancel Email Invitation")
async def cancel_email_invitation(
    invitation_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: EmailInvitationService = Depends(get_email_invitation_service),
):
    invitation = await service.cancel_invitation(invitation_id, current_user.id)
    return EmailInvitationResponse.model_validate(invitation)


@router.get("/teams/{team_id}", response_model=list[EmailInvitationResponse], summary="Team Email Invitations")
async def list_team_email_invitations(
    team_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: EmailInvitationService = Depends(get_email_invitation_service),
):
    """Pending email invitations of a team. Requires owner or admin."""
    invitations = await service.get_team_invitations(team_id, current_user.id)
    return [EmailInvitationResponse.model_validate(i) for i in invitations]


@router.get("/teams/{team_id}/check", response_model=ExistingInvitationResponse, summary="Check Existing Invitation")
async def check_existing_invitation(
    team_id: uuid.UUID,
    email: str = Query(..., min_length=3),
    service: EmailInvitationService = Depends(get_email_invitation_service),
):
    invitation = await service.check_existing_invitation(team_id, email)
    if invitation is None:
        return ExistingInvitationResponse(exists=False)
    return ExistingInvitationResponse(
        exists=True,
        invitation=EmailInvitationResponse.model_validate(invitation),
    )
