"""
Tests for recommendations, portfolio contributors and collaboration history.
"""

import pytest

from api.services import CollaborationService, PortfolioContributorService, RecommendationService
from core.exceptions import ConflictError, NotFoundError, PermissionDenied, ValidationError
from database.models import (
    ContributorStatus,
    LIKE_MESSAGE,
    Portfolio,
    Project,
    RecommendationStatus,
    RecommendationType,
)
from tests.helpers import add_member, create_team, create_user


async def create_portfolio(db, user, name="Checkout redesign"):
    portfolio = Portfolio(user_id=user.id, name=name)
    db.add(portfolio)
    await db.commit()
    return portfolio


async def create_project(db, team, title="Payments launch"):
    project = Project(team_id=team.id, title=title)
    db.add(project)
    await db.commit()
    return project


# ==================== Recommendations ==================== #

class TestCreateRecommendation:
    """Test recommendation rules."""

    @pytest.mark.asyncio
    async def test_request_is_pending(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")

        rec = await RecommendationService(db).create_recommendation(
            sender.id, receiver.id, "Great to work with", rating=5
        )

        assert rec.type == RecommendationType.REQUEST
        assert rec.status == RecommendationStatus.PENDING
        assert rec.sender.email == "a@acme.io"

    @pytest.mark.asyncio
    async def test_given_is_accepted(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")

        rec = await RecommendationService(db).create_recommendation(
            sender.id, receiver.id, "Solid work", rec_type=RecommendationType.GIVEN
        )

        assert rec.status == RecommendationStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_self_recommendation(self, db):
        user = await create_user(db, "a@acme.io")

        with pytest.raises(ValidationError):
            await RecommendationService(db).create_recommendation(user.id, user.id, "Me!")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_range(self, db, rating):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")

        with pytest.raises(ValidationError, match="between 1 and 5"):
            await RecommendationService(db).create_recommendation(
                sender.id, receiver.id, "Hm", rating=rating
            )

    @pytest.mark.asyncio
    async def test_one_real_recommendation_per_pair(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")
        service = RecommendationService(db)
        await service.create_recommendation(sender.id, receiver.id, "First")

        with pytest.raises(ConflictError):
            await service.create_recommendation(sender.id, receiver.id, "Second")

    @pytest.mark.asyncio
    async def test_likes_do_not_count(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")
        portfolio = await create_portfolio(db, receiver)
        service = RecommendationService(db)

        await service.create_recommendation(sender.id, receiver.id, LIKE_MESSAGE, portfolio_id=portfolio.id)
        await service.create_recommendation(sender.id, receiver.id, LIKE_MESSAGE, portfolio_id=portfolio.id)
        real = await service.create_recommendation(sender.id, receiver.id, "Fantastic")

        assert real.message == "Fantastic"

    @pytest.mark.asyncio
    async def test_portfolio_recommendation(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")
        portfolio = await create_portfolio(db, receiver)
        service = RecommendationService(db)

        rec = await service.create_recommendation(sender.id, receiver.id, "Lovely", portfolio_id=portfolio.id)

        assert rec.type == RecommendationType.GIVEN
        assert rec.status == RecommendationStatus.ACCEPTED
        listed = await service.get_portfolio_recommendations(portfolio.id)
        assert [r.id for r in listed] == [rec.id]

    @pytest.mark.asyncio
    async def test_portfolio_must_belong_to_receiver(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")
        portfolio = await create_portfolio(db, sender)

        with pytest.raises(ValidationError):
            await RecommendationService(db).create_recommendation(
                sender.id, receiver.id, "Nice", portfolio_id=portfolio.id
            )

    @pytest.mark.asyncio
    async def test_project_requires_both_members(self, db):
        owner = await create_user(db, "a@acme.io")
        outsider = await create_user(db, "b@globex.com")
        team = await create_team(db, owner)
        project = await create_project(db, team)
        service = RecommendationService(db)

        with pytest.raises(PermissionDenied):
            await service.create_recommendation(owner.id, outsider.id, "Great", project_id=project.id)

        await add_member(db, team, outsider)
        rec = await service.create_recommendation(owner.id, outsider.id, "Great", project_id=project.id)
        assert rec.team_id == team.id

    @pytest.mark.asyncio
    async def test_team_requires_shared_team(self, db):
        owner = await create_user(db, "a@acme.io")
        outsider = await create_user(db, "b@globex.com")
        team = await create_team(db, owner)

        with pytest.raises(PermissionDenied):
            await RecommendationService(db).create_recommendation(
                owner.id, outsider.id, "Great", team_id=team.id
            )


class TestRecommendationLifecycle:

    @pytest.mark.asyncio
    async def test_receiver_updates_status(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")
        service = RecommendationService(db)
        rec = await service.create_recommendation(sender.id, receiver.id, "Great")

        with pytest.raises(PermissionDenied):
            await service.update_recommendation_status(rec.id, sender.id, RecommendationStatus.ACCEPTED)

        updated = await service.update_recommendation_status(rec.id, receiver.id, RecommendationStatus.ACCEPTED)
        assert updated.status == RecommendationStatus.ACCEPTED
        assert [r.id for r in await service.get_user_recommendations(receiver.id)] == [rec.id]

    @pytest.mark.asyncio
    async def test_delete(self, db):
        sender = await create_user(db, "a@acme.io")
        receiver = await create_user(db, "b@acme.io")
        stranger = await create_user(db, "c@acme.io")
        service = RecommendationService(db)
        rec = await service.create_recommendation(sender.id, receiver.id, "Great")

        with pytest.raises(PermissionDenied):
            await service.delete_recommendation(rec.id, stranger.id)

        await service.delete_recommendation(rec.id, sender.id)
        with pytest.raises(NotFoundError):
            await service.delete_recommendation(rec.id, sender.id)


# ==================== Portfolio contributors ==================== #

class TestPortfolioContributors:
    """Test contributor invitations on portfolio items."""

    @pytest.mark.asyncio
    async def test_invite_and_accept(self, db):
        owner = await create_user(db, "a@acme.io")
        teammate = await create_user(db, "b@acme.io")
        portfolio = await create_portfolio(db, owner)
        service = PortfolioContributorService(db)

        contributor = await service.add_contributor(portfolio.id, owner.id, teammate.id, role="Designer")

        assert contributor.status == ContributorStatus.PENDING
        assert await service.get_portfolio_contributors(portfolio.id) == []
        invitations = await service.get_user_contributor_invitations(teammate.id)
        assert [c.id for c in invitations] == [contributor.id]

        await service.update_contributor_status(portfolio.id, contributor.id, teammate.id, ContributorStatus.ACCEPTED)

        accepted = await service.get_portfolio_contributors(portfolio.id)
        assert [c.user.email for c in accepted] == ["b@acme.io"]

    @pytest.mark.asyncio
    async def test_rules(self, db):
        owner = await create_user(db, "a@acme.io")
        teammate = await create_user(db, "b@acme.io")
        stranger = await create_user(db, "c@acme.io")
        portfolio = await create_portfolio(db, owner)
        service = PortfolioContributorService(db)

        with pytest.raises(PermissionDenied):
            await service.add_contributor(portfolio.id, teammate.id, stranger.id)
        with pytest.raises(ValidationError):
            await service.add_contributor(portfolio.id, owner.id, owner.id)

        contributor = await service.add_contributor(portfolio.id, owner.id, teammate.id)
        with pytest.raises(ConflictError):
            await service.add_contributor(portfolio.id, owner.id, teammate.id)
        with pytest.raises(PermissionDenied):
            await service.remove_contributor(portfolio.id, contributor.id, stranger.id)

        await service.remove_contributor(portfolio.id, contributor.id, teammate.id)
        assert await service.get_portfolio_contributors(portfolio.id, include_all=True) == []

    @pytest.mark.asyncio
    async def test_suggestions_ranked_by_shared_teams(self, db):
        owner = await create_user(db, "a@acme.io")
        close = await create_user(db, "b@acme.io")
        distant = await create_user(db, "c@acme.io")
        already = await create_user(db, "d@acme.io")
        await create_user(db, "e@acme.io")
        first = await create_team(db, owner, name="First")
        second = await create_team(db, owner, name="Second")
        for team in (first, second):
            await add_member(db, team, close)
        await add_member(db, first, distant)
        await add_member(db, first, already)
        portfolio = await create_portfolio(db, owner)
        service = PortfolioContributorService(db)
        await service.add_contributor(portfolio.id, owner.id, already.id)

        suggestions = await service.suggest_contributors(portfolio.id, owner.id)

        assert [(s["user"].id, s["shared_teams_count"]) for s in suggestions] == [
            (close.id, 2),
            (distant.id, 1),
        ]
        with pytest.raises(PermissionDenied):
            await service.suggest_contributors(portfolio.id, close.id)


# ==================== Collaboration ==================== #

class TestCollaboration:

    @pytest.mark.asyncio
    async def test_context(self, db):
        alice = await create_user(db, "a@acme.io")
        bob = await create_user(db, "b@acme.io")
        carol = await create_user(db, "c@acme.io")
        team = await create_team(db, alice)
        await add_member(db, team, bob)
        await create_project(db, team)
        service = CollaborationService(db)

        context = await service.get_collaboration_context(alice.id, bob.id)

        assert context["have_worked_together"] is True
        assert context["shared_teams_count"] == 1
        assert context["shared_projects_count"] == 1
        assert await service.have_worked_together(alice.id, carol.id) is False
        assert await service.have_worked_together(alice.id, alice.id) is False
        assert await service.get_shared_teams(alice.id, alice.id) == []
