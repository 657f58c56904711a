"""Portfolio contributor, recommendation and collaboration schemas."""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.teams import TeamSummary, ProjectResponse
from api.schemas.users import UserSummary, PortfolioResponse
from database.models import ContributorStatus, RecommendationType, RecommendationStatus


# ==================== Contributors ==================== #

class PortfolioWithOwner(PortfolioResponse):
    user: UserSummary


class ContributorCreate(BaseModel):
    user_id: uuid.UUID
    role: Optional[str] = Field(None, max_length=255, description="What the contributor did")


class ContributorStatusUpdate(BaseModel):
    status: ContributorStatus

    @field_validator("status")
    @classmethod
    def resolved_only(cls, v: ContributorStatus) -> ContributorStatus:
        if v == ContributorStatus.PENDING:
            raise ValueError("Status must be ACCEPTED or REJECTED")
        return v


class ContributorResponse(BaseModel):
    id: uuid.UUID
    portfolio_id: uuid.UUID
    user_id: uuid.UUID
    role: Optional[str] = None
    status: ContributorStatus
    created_at: datetime
    user: UserSummary
    portfolio: PortfolioWithOwner

    class Config:
        from_attributes = True


class ContributorSuggestion(BaseModel):
    user: UserSummary
    shared_teams_count: int


# ==================== Recommendations ==================== #

class RecommendationCreate(BaseModel):
    message: str = Field(min_length=1, max_length=5000)
    receiver_id: uuid.UUID
    type: RecommendationType = RecommendationType.REQUEST
    rating: Optional[int] = Field(None, description="1-5, for portfolio ratings")
    portfolio_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    team_id: Optional[uuid.UUID] = None


class RecommendationStatusUpdate(BaseModel):
    status: RecommendationStatus

    @field_validator("status")
    @classmethod
    def resolved_only(cls, v: RecommendationStatus) -> RecommendationStatus:
        if v == RecommendationStatus.PENDING:
            raise ValueError("Status must be ACCEPTED or REJECTED")
        return v


class RecommendationResponse(BaseModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    message: str
    type: RecommendationType
    status: RecommendationStatus
    rating: Optional[int] = None
    portfolio_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    team_id: Optional[uuid.UUID] = None
    created_at: datetime
    sender: UserSummary
    receiver: UserSummary
    portfolio: Optional[PortfolioResponse] = None
    project: Optional[ProjectResponse] = None
    team: Optional[TeamSummary] = None

    class Config:
        from_attributes = True


# ==================== Collaboration ==================== #

class CollaborationContext(BaseModel):
    have_worked_together: bool
    shared_teams_count: int
    shared_projects_count: int
    shared_teams: list[TeamSummary]
    shared_projects: list[ProjectResponse]
