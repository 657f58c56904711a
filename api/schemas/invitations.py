"""Invitation-related Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from api.schemas.teams import TeamSummary, TeamMemberResponse
from api.schemas.users import UserSummary
from database.models import TeamRole, InvitationStatus, EmailInvitationStatus


class InvitationCreate(BaseModel):
    """Schema for sending an in-app invitation."""

    team_id: uuid.UUID
    receiver_id: uuid.UUID
    role: TeamRole = Field(default=TeamRole.MEMBER, description="Role granted on acceptance")
    message: Optional[str] = Field(None, max_length=1000)


class InvitationResponse(BaseModel):
    id: uuid.UUID
    team_id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    role: TeamRole
    message: Optional[str] = None
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    team: TeamSummary
    sender: UserSummary
    receiver: UserSummary

    class Config:
        from_attributes = True


class EmailInvitationCreate(BaseModel):
    """Email invitation request. The address is checked against the company email rule."""

    email: str = Field(min_length=3, max_length=255)
    role: TeamRole = TeamRole.MEMBER


class EmailInvitationResponse(BaseModel):
    id: uuid.UUID
    email: str
    team_id: uuid.UUID
    invited_by_id: uuid.UUID
    role: TeamRole
    status: EmailInvitationStatus
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: datetime
    team: TeamSummary
    invited_by: UserSummary

    class Config:
        from_attributes = True


class TokenValidationResponse(BaseModel):
    valid: bool
    invitation: EmailInvitationResponse


class EmailInvitationAcceptResponse(BaseModel):
    success: bool
    team: TeamSummary


class ExistingInvitationResponse(BaseModel):
    exists: bool
    invitation: Optional[EmailInvitationResponse] = None


class InviteMemberResponse(BaseModel):
    """Outcome of the unified team invite."""

    type: Literal["direct", "internal_invitation", "email_invitation"]
    message: str
    member: Optional[TeamMemberResponse] = None
    invitation: Optional[InvitationResponse] = None
    email_invitation: Optional[EmailInvitationResponse] = None
