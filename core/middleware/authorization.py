"""
Team membership authorization.

Role checks shared by every service that acts on behalf of a team: team
management, invitations, job postings, applications and dashboards.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import PermissionDenied
from database.models.teams import TeamMember, TeamRole, MANAGER_ROLES

logger = logging.getLogger(__name__)


class MembershipAuthorizer:
    """
    Answers "what may this user do in this team" from TeamMember rows.

    Args:
        db: Session of the current unit of work
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_membership(
        self, user_id: uuid.UUID, team_id: uuid.UUID
    ) -> Optional[TeamMember]:
        result = await self.db.execute(
            select(TeamMember).where(
                TeamMember.user_id == user_id,
                TeamMember.team_id == team_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_role(self, user_id: uuid.UUID, team_id: uuid.UUID) -> Optional[TeamRole]:
        """Role of the user in the team, or None for non-members."""
        result = await self.db.execute(
            select(TeamMember.role).where(
                TeamMember.user_id == user_id,
                TeamMember.team_id == team_id,
            )
        )
        return result.scalar_one_or_none()

    async def is_member(self, user_id: uuid.UUID, team_id: uuid.UUID) -> bool:
        return await self.get_role(user_id, team_id) is not None

    async def is_owner(self, user_id: uuid.UUID, team_id: uuid.UUID) -> bool:
        return await self.get_role(user_id, team_id) == TeamRole.OWNER

    async def can_manage(self, user_id: uuid.UUID, team_id: uuid.UUID) -> bool:
        """OWNER and ADMIN may manage members, invitations and jobs."""
        return await self.get_role(user_id, team_id) in MANAGER_ROLES

    async def require_manager(
        self, user_id: uuid.UUID, team_id: uuid.UUID, message: str
    ) -> TeamRole:
        """
        Ensure the user is an OWNER or ADMIN of the team.

        Args:
            user_id: Acting user
            team_id: Team being acted on
            message: Error message when the check fails

        Returns:
            The user's role

        Raises:
            PermissionDenied: If the user is not an owner or admin
        """
        role = await self.get_role(user_id, team_id)
        if role not in MANAGER_ROLES:
            logger.warning(
                f"User {user_id} denied manager access to team {team_id} (role={role})"
            )
            raise PermissionDenied(message)
        return role
