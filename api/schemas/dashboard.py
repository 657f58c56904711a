"""Dashboard Pydantic schemas."""

from pydantic import BaseModel

from api.schemas.invitations import InvitationResponse
from api.schemas.teams import TeamSummary, TeamMemberResponse, ProjectResponse
from api.schemas.users import UserResponse
from database.models import TeamRole


class UserStatistics(BaseModel):
    teams_count: int
    pending_invitations_count: int
    portfolio_count: int
    skills_count: int
    pending_requests_sent: int
    pending_requests_received: int
    accepted_recommendations: int
    given_recommendations: int


class RecentTeam(BaseModel):
    team: TeamSummary
    user_role: TeamRole
    member_count: int
    project_count: int


class UserDashboard(BaseModel):
    user: UserResponse
    statistics: UserStatistics
    recent_teams: list[RecentTeam]
    recent_invitations: list[InvitationResponse]


class TeamStatistics(BaseModel):
    members_count: int
    pending_invitations_count: int
    pending_email_invitations_count: int
    projects_count: int
    active_jobs_count: int


class TeamDashboard(BaseModel):
    team: TeamSummary
    statistics: TeamStatistics
    members: list[TeamMemberResponse]
    recent_invitations: list[InvitationResponse]
    projects: list[ProjectResponse]
    user_role: TeamRole
