"""Collaboration history between two users, derived from shared team membership."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import aliased

from api.services.base import BaseService
from database.models import Team, TeamMember, Project

logger = logging.getLogger(__name__)


class CollaborationService(BaseService):

    def _shared_team_ids(self, user_id: uuid.UUID, other_user_id: uuid.UUID):
        mine = aliased(TeamMember)
        theirs = aliased(TeamMember)
        return (
            select(mine.team_id)
            .join(theirs, theirs.team_id == mine.team_id)
            .where(mine.user_id == user_id, theirs.user_id == other_user_id)
        )

    async def get_shared_teams(self, user_id: uuid.UUID, other_user_id: uuid.UUID) -> list[Team]:
        """Teams both users are members of, newest first."""
        if user_id == other_user_id:
            return []
        result = await self.db.execute(
            select(Team)
            .where(Team.id.in_(self._shared_team_ids(user_id, other_user_id)))
            .order_by(Team.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_shared_projects(self, user_id: uuid.UUID, other_user_id: uuid.UUID) -> list[Project]:
        """Projects of the teams both users are members of."""
        if user_id == other_user_id:
            return []
        result = await self.db.execute(
            select(Project)
            .where(Project.team_id.in_(self._shared_team_ids(user_id, other_user_id)))
            .order_by(Project.created_at.desc())
        )
        return list(result.scalars().all())

    async def have_worked_together(self, user_id: uuid.UUID, other_user_id: uuid.UUID) -> bool:
        if user_id == other_user_id:
            return False
        result = await self.db.execute(self._shared_team_ids(user_id, other_user_id).limit(1))
        return result.first() is not None

    async def get_collaboration_context(self, user_id: uuid.UUID, other_user_id: uuid.UUID) -> dict:
        """
        Everything the recommendation dialog needs to know about two users.

        Returns:
            Dict with have_worked_together, counts and the shared teams/projects
        """
        shared_teams = await self.get_shared_teams(user_id, other_user_id)
        shared_projects = await self.get_shared_projects(user_id, other_user_id)
        return {
            "have_worked_together": bool(shared_teams),
            "shared_teams_count": len(shared_teams),
            "shared_projects_count": len(shared_projects),
            "shared_teams": shared_teams,
            "shared_projects": shared_projects,
        }
