"""
Dashboard service functions.

Aggregates for the user and team dashboards. The queries run one after
another on the request's session.
"""

import logging
import uuid

from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from api.services.invitations import INVITATION_OPTIONS
from core.exceptions import PermissionDenied
from core.utils.datetime import ensure_utc
from database.models import (
    EmailInvitation,
    EmailInvitationStatus,
    Invitation,
    InvitationStatus,
    JobPosting,
    JobStatus,
    Portfolio,
    Project,
    Recommendation,
    RecommendationStatus,
    RecommendationType,
    Team,
    TeamMember,
    TeamRole,
    User,
    UserSkill,
)

logger = logging.getLogger(__name__)

RECENT_TEAMS_LIMIT = 5
RECENT_INVITATIONS_LIMIT = 5
TEAM_RECENT_INVITATIONS_LIMIT = 10


class DashboardService(BaseService):

    async def _count(self, model, *filters) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(model).where(*filters)
        )
        return result.scalar_one()

    async def _team_counts(self, team_id: uuid.UUID) -> dict:
        return {
            "member_count": await self._count(TeamMember, TeamMember.team_id == team_id),
            "project_count": await self._count(Project, Project.team_id == team_id),
        }

    async def get_user_dashboard(self, user_id: uuid.UUID) -> dict:
        """
        Summary, statistics, recent teams and recent pending invitations of a user.

        Args:
            user_id: Dashboard owner

        Returns:
            Dict with user, statistics, recent_teams and recent_invitations
        """
        user = await self._get_or_404(User, user_id, "User not found")

        statistics = {
            "teams_count": await self._count(TeamMember, TeamMember.user_id == user_id),
            "pending_invitations_count": await self._count(
                Invitation,
                Invitation.receiver_id == user_id,
                Invitation.status == InvitationStatus.PENDING,
            ),
            "portfolio_count": await self._count(Portfolio, Portfolio.user_id == user_id),
            "skills_count": await self._count(UserSkill, UserSkill.user_id == user_id),
            "pending_requests_sent": await self._count(
                Recommendation,
                Recommendation.sender_id == user_id,
                Recommendation.type == RecommendationType.REQUEST,
                Recommendation.status == RecommendationStatus.PENDING,
            ),
            "pending_requests_received": await self._count(
                Recommendation,
                Recommendation.receiver_id == user_id,
                Recommendation.type == RecommendationType.REQUEST,
                Recommendation.status == RecommendationStatus.PENDING,
            ),
            "accepted_recommendations": await self._count(
                Recommendation,
                Recommendation.receiver_id == user_id,
                Recommendation.status == RecommendationStatus.ACCEPTED,
            ),
            "given_recommendations": await self._count(
                Recommendation,
                Recommendation.sender_id == user_id,
                Recommendation.type == RecommendationType.GIVEN,
            ),
        }

        owned = (await self.db.execute(
            select(Team)
            .where(Team.owner_id == user_id)
            .order_by(Team.created_at.desc())
            .limit(RECENT_TEAMS_LIMIT)
        )).scalars().all()
        memberships = (await self.db.execute(
            select(TeamMember)
            .options(selectinload(TeamMember.team))
            .where(TeamMember.user_id == user_id)
            .order_by(TeamMember.joined_at.desc())
            .limit(RECENT_TEAMS_LIMIT)
        )).scalars().all()

        recent: dict[uuid.UUID, tuple[Team, TeamRole]] = {}
        for team in owned:
            recent[team.id] = (team, TeamRole.OWNER)
        for membership in memberships:
            recent.setdefault(membership.team_id, (membership.team, membership.role))

        ordered = sorted(recent.values(), key=lambda item: ensure_utc(item[0].created_at), reverse=True)
        recent_teams = []
        for team, role in ordered[:RECENT_TEAMS_LIMIT]:
            recent_teams.append({
                "team": team,
                "user_role": role,
                **await self._team_counts(team.id),
            })

        recent_invitations = (await self.db.execute(
            select(Invitation)
            .options(*INVITATION_OPTIONS)
            .where(
                Invitation.receiver_id == user_id,
                Invitation.status == InvitationStatus.PENDING,
            )
            .order_by(Invitation.created_at.desc())
            .limit(RECENT_INVITATIONS_LIMIT)
        )).scalars().all()

        logger.info(f"User dashboard data fetched for user: {user_id}")
        return {
            "user": user,
            "statistics": statistics,
            "recent_teams": recent_teams,
            "recent_invitations": list(recent_invitations),
        }

    async def get_team_dashboard(self, team_id: uuid.UUID, user_id: uuid.UUID) -> dict:
        """
        Statistics, members, recent invitations and projects of a team.

        Raises:
            NotFoundError: Team does not exist
            PermissionDenied: Caller is neither owner nor member
        """
        team = await self._get_or_404(Team, team_id, "Team not found")
        role = await self.authorizer.get_role(user_id, team_id)
        if role is None and team.owner_id != user_id:
            logger.warning(f"User {user_id} denied dashboard access to team {team_id}")
            raise PermissionDenied("Unauthorized to access this team dashboard")

        statistics = {
            "members_count": await self._count(TeamMember, TeamMember.team_id == team_id),
            "pending_invitations_count": await self._count(
                Invitation,
                Invitation.team_id == team_id,
                Invitation.status == InvitationStatus.PENDING,
            ),
            "pending_email_invitations_count": await self._count(
                EmailInvitation,
                EmailInvitation.team_id == team_id,
                EmailInvitation.status == EmailInvitationStatus.PENDING,
            ),
            "projects_count": await self._count(Project, Project.team_id == team_id),
            "active_jobs_count": await self._count(
                JobPosting,
                JobPosting.team_id == team_id,
                JobPosting.status == JobStatus.ACTIVE,
            ),
        }

        members = (await self.db.execute(
            select(TeamMember)
            .options(selectinload(TeamMember.user))
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.joined_at)
        )).scalars().all()

        recent_invitations = (await self.db.execute(
            select(Invitation)
            .options(*INVITATION_OPTIONS)
            .where(Invitation.team_id == team_id)
            .order_by(Invitation.created_at.desc())
            .limit(TEAM_RECENT_INVITATIONS_LIMIT)
        )).scalars().all()

        projects = (await self.db.execute(
            select(Project).where(Project.team_id == team_id).order_by(Project.created_at.desc())
        )).scalars().all()

        logger.info(f"Team dashboard data fetched for team: {team_id}")
        return {
            "team": team,
            "statistics": statistics,
            "members": list(members),
            "recent_invitations": list(recent_invitations),
            "projects": list(projects),
            "user_role": role or TeamRole.OWNER,
        }
