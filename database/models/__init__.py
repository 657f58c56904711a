from database.models.users import User, UserRole, Skill, UserSkill, WorkExperience, Portfolio
from database.models.teams import (
    Team,
    TeamMember,
    TeamRole,
    TeamType,
    SubTeamCategory,
    Project,
    LEGACY_TEAM_TYPES,
    MANAGER_ROLES,
)
from database.models.invitations import (
    Invitation,
    InvitationStatus,
    EmailInvitation,
    EmailInvitationStatus,
)
from database.models.jobs import JobPosting, JobApplication, JobType, JobStatus, ApplicationStatus
from database.models.portfolios import PortfolioContributor, ContributorStatus
from database.models.recommendations import (
    Recommendation,
    RecommendationType,
    RecommendationStatus,
    LIKE_MESSAGE,
)

__all__ = [
    "User",
    "UserRole",
    "Skill",
    "UserSkill",
    "WorkExperience",
    "Portfolio",
    "Team",
    "TeamMember",
    "TeamRole",
    "TeamType",
    "SubTeamCategory",
    "Project",
    "LEGACY_TEAM_TYPES",
    "MANAGER_ROLES",
    "Invitation",
    "InvitationStatus",
    "EmailInvitation",
    "EmailInvitationStatus",
    "JobPosting",
    "JobApplication",
    "JobType",
    "JobStatus",
    "ApplicationStatus",
    "PortfolioContributor",
    "ContributorStatus",
    "Recommendation",
    "RecommendationType",
    "RecommendationStatus",
    "LIKE_MESSAGE",
]
