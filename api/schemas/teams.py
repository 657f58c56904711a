"""Team-related Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import PaginationMeta
from api.schemas.users import UserSummary, UserPublic
from database.models import TeamType, TeamRole, SubTeamCategory, LEGACY_TEAM_TYPES


def normalize_team_type(v: Any) -> Any:
    """
    Accept current and pre-migration type names.

    >>> normalize_team_type("startup")
    <TeamType.COMPANY: 'COMPANY'>
    """
    if isinstance(v, str) and not isinstance(v, TeamType):
        value = v.strip().upper()
        if value in LEGACY_TEAM_TYPES:
            return LEGACY_TEAM_TYPES[value]
        if value not in TeamType.__members__:
            allowed = ", ".join(TeamType.__members__)
            raise ValueError(f"Invalid team type. Must be one of: {allowed}")
        return TeamType(value)
    return v


class TeamCreate(BaseModel):
    """Schema for creating a team."""

    name: str = Field(min_length=1, max_length=255, description="Team name")
    description: Optional[str] = Field(None, description="What the team does")
    type: TeamType = Field(default=TeamType.TEAM, description="TEAM, COMPANY, ORGANIZATION or DEPARTMENT")
    avatar: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=255)

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v: Any) -> Any:
        return normalize_team_type(v)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


class SubTeamCreate(TeamCreate):
    """Schema for creating a sub-team under a main team."""

    type: TeamType = Field(default=TeamType.DEPARTMENT)
    sub_team_category: Optional[SubTeamCategory] = None


class TeamUpdate(BaseModel):
    """Schema for updating a team. Omitted fields stay as they are."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[TeamType] = None
    avatar: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=255)
    sub_team_category: Optional[SubTeamCategory] = None

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v: Any) -> Any:
        return normalize_team_type(v)

    @field_validator("name", "type")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class TeamSummary(BaseModel):
    """Team fields without related records."""

    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    avatar: Optional[str] = None
    type: TeamType
    sub_team_category: Optional[SubTeamCategory] = None
    city: Optional[str] = None
    owner_id: uuid.UUID
    parent_team_id: Optional[uuid.UUID] = None
    is_main_team: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TeamWithOwner(TeamSummary):
    owner: UserSummary


class TeamMemberResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    team_id: uuid.UUID
    role: TeamRole
    joined_at: datetime
    user: UserSummary

    class Config:
        from_attributes = True


class TeamResponse(TeamWithOwner):
    """Full team with members and hierarchy."""

    members: list[TeamMemberResponse]
    sub_teams: list[TeamSummary]
    parent_team: Optional[TeamSummary] = None


class TeamListItem(BaseModel):
    team: TeamWithOwner
    member_count: int


class TeamSearchResponse(BaseModel):
    teams: list[TeamListItem]
    pagination: PaginationMeta


class MyTeamItem(BaseModel):
    team: TeamWithOwner
    role: TeamRole
    joined_at: datetime


class AddMemberRequest(BaseModel):
    user_id: uuid.UUID
    role: TeamRole = TeamRole.MEMBER


class UpdateMemberRoleRequest(BaseModel):
    role: TeamRole


class SuggestedMember(BaseModel):
    user: UserPublic
    score: int
    match_reason: str


class InviteMemberRequest(BaseModel):
    """Unified invite: an email address or a username."""

    identifier: str = Field(min_length=1, max_length=255, description="Email or username")
    role: TeamRole = TeamRole.MEMBER
    message: Optional[str] = Field(None, max_length=1000)


class ProjectResponse(BaseModel):
    id: uuid.UUID
    team_id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

