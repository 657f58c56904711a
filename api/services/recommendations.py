"""Recommendation service functions."""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from api.services.collaboration import CollaborationService
from core.exceptions import ValidationError, PermissionDenied, NotFoundError, ConflictError
from core.utils.validators import validate_rating
from database.models import (
    Portfolio,
    Project,
    Recommendation,
    RecommendationStatus,
    RecommendationType,
    TeamMember,
    User,
    LIKE_MESSAGE,
)

logger = logging.getLogger(__name__)

_RECOMMENDATION_OPTIONS = (
    selectinload(Recommendation.sender),
    selectinload(Recommendation.receiver),
    selectinload(Recommendation.portfolio),
    selectinload(Recommendation.project),
    selectinload(Recommendation.team),
)


class RecommendationService(BaseService):
    """
    Peer recommendations.

    A sender gives at most one real recommendation per receiver. Likes (the
    fixed ``LIKE_MESSAGE``) do not count toward that limit.
    """

    async def _load(self, recommendation_id: uuid.UUID) -> Recommendation:
        return await self._get_or_404(
            Recommendation, recommendation_id, "Recommendation not found", _RECOMMENDATION_OPTIONS
        )

    async def create_recommendation(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        message: str,
        rec_type: RecommendationType = RecommendationType.REQUEST,
        rating: Optional[int] = None,
        portfolio_id: Optional[uuid.UUID] = None,
        project_id: Optional[uuid.UUID] = None,
        team_id: Optional[uuid.UUID] = None,
    ) -> Recommendation:
        """
        Create a recommendation, optionally tied to a portfolio, project or team.

        Portfolio recommendations are open to any user and are stored as
        GIVEN/ACCEPTED. Project recommendations need both users in the
        project's team. Team recommendations need a shared team.

        Args:
            sender_id: Author
            receiver_id: Recommended user
            message: Recommendation text
            rec_type: REQUEST (awaits the receiver) or GIVEN
            rating: Optional 1-5 rating
            portfolio_id: Portfolio being rated
            project_id: Project worked on together
            team_id: Team worked in together

        Returns:
            The created recommendation
        """
        if sender_id == receiver_id:
            raise ValidationError("You cannot recommend yourself")

        ok, error = validate_rating(rating)
        if not ok:
            raise ValidationError(error)

        await self._get_or_404(User, receiver_id, "Recipient user not found")

        if message != LIKE_MESSAGE:
            existing = (await self.db.execute(
                select(Recommendation.id).where(
                    Recommendation.sender_id == sender_id,
                    Recommendation.receiver_id == receiver_id,
                    Recommendation.message != LIKE_MESSAGE,
                )
            )).first()
            if existing is not None:
                raise ConflictError("You have already given a recommendation to this user")

        if portfolio_id is not None:
            portfolio = await self._get_or_404(Portfolio, portfolio_id, "Portfolio not found")
            if portfolio.user_id != receiver_id:
                raise ValidationError("Portfolio does not belong to the specified receiver")

        if project_id is not None:
            project = await self._get_or_404(Project, project_id, "Project not found")
            member_ids = set((await self.db.execute(
                select(TeamMember.user_id).where(TeamMember.team_id == project.team_id)
            )).scalars().all())
            if sender_id not in member_ids or receiver_id not in member_ids:
                raise PermissionDenied("Both users must be members of the project team")
            team_id = project.team_id
        elif team_id is not None:
            if not await CollaborationService(self.db).have_worked_together(sender_id, receiver_id):
                raise PermissionDenied("Users have not worked together")

        if portfolio_id is not None:
            rec_type = RecommendationType.GIVEN
        status = (
            RecommendationStatus.ACCEPTED
            if rec_type == RecommendationType.GIVEN
            else RecommendationStatus.PENDING
        )

        recommendation = Recommendation(
            sender_id=sender_id,
            receiver_id=receiver_id,
            message=message,
            type=rec_type,
            status=status,
            rating=rating,
            portfolio_id=portfolio_id,
            project_id=project_id,
            team_id=team_id,
        )
        self.db.add(recommendation)
        await self.db.commit()

        logger.info(f"Recommendation created: {recommendation.id}")
        return await self._load(recommendation.id)

    async def get_portfolio_recommendations(self, portfolio_id: uuid.UUID) -> list[Recommendation]:
        """Accepted recommendations on a portfolio, newest first."""
        result = await self.db.execute(
            select(Recommendation)
            .options(*_RECOMMENDATION_OPTIONS)
            .where(
                Recommendation.portfolio_id == portfolio_id,
                Recommendation.status == RecommendationStatus.ACCEPTED,
            )
            .order_by(Recommendation.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_user_recommendations(self, user_id: uuid.UUID) -> list[Recommendation]:
        result = await self.db.execute(
            select(Recommendation)
            .options(*_RECOMMENDATION_OPTIONS)
            .where(Recommendation.receiver_id == user_id)
            .order_by(Recommendation.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_recommendation_status(
        self,
        recommendation_id: uuid.UUID,
        user_id: uuid.UUID,
        status: RecommendationStatus,
    ) -> Recommendation:
        recommendation = await self._load(recommendation_id)
        if recommendation.receiver_id != user_id:
            raise PermissionDenied("You can only update your own recommendations")

        recommendation.status = status
        await self.db.commit()

        logger.info(f"Recommendation status updated: {recommendation_id} -> {status.value}")
        return await self._load(recommendation_id)

    async def delete_recommendation(self, recommendation_id: uuid.UUID, user_id: uuid.UUID) -> None:
        recommendation = await self._get(Recommendation, recommendation_id)
        if recommendation is None:
            raise NotFoundError("Recommendation not found")
        if user_id not in (recommendation.sender_id, recommendation.receiver_id):
            raise PermissionDenied("You can only delete your own recommendations")

        await self.db.delete(recommendation)
        await self.db.commit()
        logger.info(f"Recommendation deleted: {recommendation_id}")
