"""Portfolio contributor service functions."""

import logging
import uuid
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from core.exceptions import ValidationError, PermissionDenied, NotFoundError, ConflictError
from database.models import (
    Portfolio,
    PortfolioContributor,
    ContributorStatus,
    TeamMember,
    User,
)

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 20

_CONTRIBUTOR_OPTIONS = (
    selectinload(PortfolioContributor.user),
    selectinload(PortfolioContributor.portfolio).selectinload(Portfolio.user),
)


class PortfolioContributorService(BaseService):
    """
    Invite teammates to be credited on a portfolio item.

    Contributor rows go PENDING -> ACCEPTED or REJECTED.
    """

    async def _get_portfolio(self, portfolio_id: uuid.UUID) -> Portfolio:
        return await self._get_or_404(Portfolio, portfolio_id, "Portfolio not found")

    async def _get_contributor(
        self, portfolio_id: uuid.UUID, contributor_id: uuid.UUID
    ) -> PortfolioContributor:
        contributor = await self._get(PortfolioContributor, contributor_id, _CONTRIBUTOR_OPTIONS)
        if contributor is None or contributor.portfolio_id != portfolio_id:
            raise NotFoundError("Contributor not found")
        return contributor

    async def suggest_contributors(self, portfolio_id: uuid.UUID, user_id: uuid.UUID) -> list[dict]:
        """
        Teammates of the portfolio owner who are not yet contributors.

        Returns:
            Dicts of user and shared_teams_count, most shared teams first
        """
        portfolio = await self._get_portfolio(portfolio_id)
        if portfolio.user_id != user_id:
            raise PermissionDenied("Only the portfolio owner can view contributor suggestions")

        owner_teams = select(TeamMember.team_id).where(TeamMember.user_id == user_id)
        existing = select(PortfolioContributor.user_id).where(
            PortfolioContributor.portfolio_id == portfolio_id
        )
        shared = func.count(func.distinct(TeamMember.team_id)).label("shared_teams_count")

        rows = await self.db.execute(
            select(TeamMember.user_id, shared)
            .where(
                TeamMember.team_id.in_(owner_teams),
                TeamMember.user_id != user_id,
                TeamMember.user_id.not_in(existing),
            )
            .group_by(TeamMember.user_id)
            .order_by(shared.desc())
            .limit(SUGGESTION_LIMIT)
        )
        ranked = rows.all()
        if not ranked:
            return []

        users = {
            u.id: u
            for u in (await self.db.execute(
                select(User).where(User.id.in_([r.user_id for r in ranked]))
            )).scalars().all()
        }
        return [
            {"user": users[r.user_id], "shared_teams_count": r.shared_teams_count}
            for r in ranked
        ]

    async def add_contributor(
        self,
        portfolio_id: uuid.UUID,
        owner_id: uuid.UUID,
        user_id: uuid.UUID,
        role: Optional[str] = None,
    ) -> PortfolioContributor:
        portfolio = await self._get_portfolio(portfolio_id)
        if portfolio.user_id != owner_id:
            raise PermissionDenied("Only the portfolio owner can add contributors")
        if user_id == owner_id:
            raise ValidationError("You cannot add yourself as a contributor")

        await self._get_or_404(User, user_id, "User not found")

        existing = (await self.db.execute(
            select(PortfolioContributor.id).where(
                PortfolioContributor.portfolio_id == portfolio_id,
                PortfolioContributor.user_id == user_id,
            )
        )).first()
        if existing is not None:
            raise ConflictError("User is already a contributor or has a pending invitation")

        contributor = PortfolioContributor(
            portfolio_id=portfolio_id,
            user_id=user_id,
            role=role,
            status=ContributorStatus.PENDING,
        )
        self.db.add(contributor)
        await self.db.commit()

        logger.info(f"Contributor invited: {contributor.id} (portfolio={portfolio_id}, user={user_id})")
        return await self._get_contributor(portfolio_id, contributor.id)

    async def update_contributor_status(
        self,
        portfolio_id: uuid.UUID,
        contributor_id: uuid.UUID,
        user_id: uuid.UUID,
        status: ContributorStatus,
    ) -> PortfolioContributor:
        """Accept or reject a contributor invitation (the contributor or the owner)."""
        portfolio = await self._get_portfolio(portfolio_id)
        contributor = await self._get_contributor(portfolio_id, contributor_id)
        if user_id not in (contributor.user_id, portfolio.user_id):
            raise PermissionDenied("You do not have permission to update this contributor")

        contributor.status = status
        await self.db.commit()

        logger.info(f"Contributor {contributor_id} status set to {status.value}")
        return await self._get_contributor(portfolio_id, contributor_id)

    async def get_portfolio_contributors(
        self, portfolio_id: uuid.UUID, include_all: bool = False
    ) -> list[PortfolioContributor]:
        await self._get_portfolio(portfolio_id)
        query = select(PortfolioContributor).options(*_CONTRIBUTOR_OPTIONS).where(
            PortfolioContributor.portfolio_id == portfolio_id
        )
        if not include_all:
            query = query.where(PortfolioContributor.status == ContributorStatus.ACCEPTED)
        result = await self.db.execute(query.order_by(PortfolioContributor.created_at))
        return list(result.scalars().all())

    async def get_user_contributor_invitations(self, user_id: uuid.UUID) -> list[PortfolioContributor]:
        result = await self.db.execute(
            select(PortfolioContributor)
            .options(*_CONTRIBUTOR_OPTIONS)
            .where(
                PortfolioContributor.user_id == user_id,
                PortfolioContributor.status == ContributorStatus.PENDING,
            )
            .order_by(PortfolioContributor.created_at.desc())
        )
        return list(result.scalars().all())

    async def remove_contributor(
        self, portfolio_id: uuid.UUID, contributor_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        portfolio = await self._get_portfolio(portfolio_id)
        contributor = await self._get_contributor(portfolio_id, contributor_id)
        if user_id not in (contributor.user_id, portfolio.user_id):
            raise PermissionDenied("You do not have permission to remove this contributor")

        await self.db.delete(contributor)
        await self.db.commit()
        logger.info(f"Contributor removed: {contributor_id} (portfolio={portfolio_id})")
