"""
API Services Layer.

Business rules for the API endpoints. Each service works on the request's
database session and raises ``core.exceptions`` errors.
"""

from api.services.auth import AuthService
from api.services.users import UserService
from api.services.teams import TeamService
from api.services.invitations import InvitationService
from api.services.email_invitations import EmailInvitationService
from api.services.jobs import JobService
from api.services.applications import ApplicationService
from api.services.portfolios import PortfolioContributorService
from api.services.recommendations import RecommendationService
from api.services.collaboration import CollaborationService
from api.services.dashboard import DashboardService

__all__ = [
    "AuthService",
    "UserService",
    "TeamService",
    "InvitationService",
    "EmailInvitationService",
    "JobService",
    "ApplicationService",
    "PortfolioContributorService",
    "RecommendationService",
    "CollaborationService",
    "DashboardService",
]
