"""
Tests for TeamService.

Tests:
- Team creation and slugs
- Sub-team hierarchy rules
- Membership management and role rules
- Unified invite channel selection
- Member suggestions
"""

import uuid

import pytest
from sqlalchemy import select

from api.services import TeamService
from core.exceptions import ConflictError, NotFoundError, PermissionDenied, ValidationError
from database.models import EmailInvitation, Invitation, SubTeamCategory, TeamMember, TeamRole
from tests.helpers import add_member, create_team, create_user


# ==================== Teams ==================== #

class TestCreateTeam:
    """Test team creation."""

    @pytest.mark.asyncio
    async def test_creator_becomes_owner(self, db):
        owner = await create_user(db, "owner@acme.io")

        team = await TeamService(db).create_team(owner.id, "Acme Design & Co")

        assert team.slug == "acme-design-co"
        assert team.owner_id == owner.id
        assert team.is_main_team
        assert [(m.user_id, m.role) for m in team.members] == [(owner.id, TeamRole.OWNER)]

    @pytest.mark.asyncio
    async def test_slug_collision_gets_suffix(self, db):
        first_owner = await create_user(db, "a@acme.io")
        second_owner = await create_user(db, "b@acme.io")
        service = TeamService(db)

        first = await service.create_team(first_owner.id, "Acme Labs")
        second = await service.create_team(second_owner.id, "Acme Labs")

        assert first.slug == "acme-labs"
        assert second.slug.startswith("acme-labs-")
        assert second.slug != first.slug

    @pytest.mark.asyncio
    async def test_get_team_by_slug_or_id(self, db):
        owner = await create_user(db, "owner@acme.io")
        service = TeamService(db)
        team = await service.create_team(owner.id, "Acme")

        assert (await service.get_team("acme")).id == team.id
        assert (await service.get_team(str(team.id))).id == team.id

        with pytest.raises(NotFoundError):
            await service.get_team("nope")

    @pytest.mark.asyncio
    async def test_rename_regenerates_slug(self, db):
        owner = await create_user(db, "owner@acme.io")
        service = TeamService(db)
        team = await service.create_team(owner.id, "Acme")

        updated = await service.update_team(team.id, owner.id, {"name": "Acme Studio"})

        assert updated.slug == "acme-studio"

    @pytest.mark.asyncio
    async def test_only_owner_updates_and_deletes(self, db):
        owner = await create_user(db, "owner@acme.io")
        admin = await create_user(db, "admin@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, admin, TeamRole.ADMIN)
        service = TeamService(db)

        with pytest.raises(PermissionDenied):
            await service.update_team(team.id, admin.id, {"description": "x"})
        with pytest.raises(PermissionDenied):
            await service.delete_team(team.id, admin.id)

    @pytest.mark.asyncio
    async def test_delete_cascades_to_sub_teams(self, db):
        owner = await create_user(db, "owner@acme.io")
        service = TeamService(db)
        team = await service.create_team(owner.id, "Acme")
        sub = await service.create_sub_team(team.id, owner.id, name="Design")

        await service.delete_team(team.id, owner.id)

        with pytest.raises(NotFoundError):
            await service.get_team(str(sub.id))
        remaining = (await db.execute(select(TeamMember))).scalars().all()
        assert remaining == []


class TestSubTeams:
    """Test the two-level hierarchy."""

    @pytest.mark.asyncio
    async def test_admin_creates_sub_team(self, db):
        owner = await create_user(db, "owner@acme.io")
        admin = await create_user(db, "admin@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, admin, TeamRole.ADMIN)

        sub = await TeamService(db).create_sub_team(
            team.id, admin.id, name="Platform", sub_team_category=SubTeamCategory.ENGINEERING
        )

        assert sub.parent_team_id == team.id
        assert not sub.is_main_team
        assert sub.sub_team_category == SubTeamCategory.ENGINEERING
        assert sub.members[0].user_id == admin.id

    @pytest.mark.asyncio
    async def test_member_cannot_create_sub_team(self, db):
        owner = await create_user(db, "owner@acme.io")
        member = await create_user(db, "member@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, member)

        with pytest.raises(PermissionDenied):
            await TeamService(db).create_sub_team(team.id, member.id, name="Rogue")

    @pytest.mark.asyncio
    async def test_no_third_level(self, db):
        owner = await create_user(db, "owner@acme.io")
        service = TeamService(db)
        team = await service.create_team(owner.id, "Acme")
        sub = await service.create_sub_team(team.id, owner.id, name="Design")

        with pytest.raises(ValidationError, match="main teams"):
            await service.create_sub_team(sub.id, owner.id, name="Icons")

    @pytest.mark.asyncio
    async def test_outsider_under_sub_team_denied(self, db):
        owner = await create_user(db, "owner@acme.io")
        outsider = await create_user(db, "outsider@acme.io")
        service = TeamService(db)
        team = await service.create_team(owner.id, "Acme")
        sub = await service.create_sub_team(team.id, owner.id, name="Design")

        with pytest.raises(PermissionDenied):
            await service.create_sub_team(sub.id, outsider.id, name="Icons")

    @pytest.mark.asyncio
    async def test_category_only_on_sub_teams(self, db):
        owner = await create_user(db, "owner@acme.io")
        service = TeamService(db)
        team = await service.create_team(owner.id, "Acme")
        sub = await service.create_sub_team(team.id, owner.id, name="Design")

        with pytest.raises(ValidationError, match="Only sub-teams"):
            await service.update_team(team.id, owner.id, {"sub_team_category": SubTeamCategory.ENGINEERING})

        updated = await service.update_team(sub.id, owner.id, {"sub_team_category": SubTeamCategory.DESIGN})
        assert updated.sub_team_category == SubTeamCategory.DESIGN

    @pytest.mark.asyncio
    async def test_missing_parent(self, db):
        owner = await create_user(db, "owner@acme.io")

        with pytest.raises(NotFoundError):
            await TeamService(db).create_sub_team(uuid.uuid4(), owner.id, name="Orphan")

    @pytest.mark.asyncio
    async def test_sub_teams_hidden_from_search_and_my_teams(self, db):
        owner = await create_user(db, "owner@acme.io")
        service = TeamService(db)
        team = await service.create_team(owner.id, "Acme")
        await service.create_sub_team(team.id, owner.id, name="Acme Design")

        search = await service.search_teams(search="acme")
        my_teams = await service.get_user_teams(owner.id)
        sub_teams = await service.get_sub_teams(team.id)

        assert [t["team"].id for t in search["teams"]] == [team.id]
        assert search["pagination"]["total"] == 1
        assert [t["team"].id for t in my_teams] == [team.id]
        assert [s["team"].name for s in sub_teams] == ["Acme Design"]
        assert sub_teams[0]["member_count"] == 1


# ==================== Members ==================== #

class TestMembers:
    """Test membership rules."""

    @pytest.mark.asyncio
    async def test_owner_adds_admin(self, db):
        owner = await create_user(db, "owner@acme.io")
        user = await create_user(db, "dev@acme.io")
        team = await create_team(db, owner)

        member = await TeamService(db).add_team_member(team.id, owner.id, user.id, TeamRole.ADMIN)

        assert member.role == TeamRole.ADMIN
        assert member.user.email == "dev@acme.io"

    @pytest.mark.asyncio
    async def test_admin_cannot_assign_admin(self, db):
        owner = await create_user(db, "owner@acme.io")
        admin = await create_user(db, "admin@acme.io")
        user = await create_user(db, "dev@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, admin, TeamRole.ADMIN)

        with pytest.raises(PermissionDenied):
            await TeamService(db).add_team_member(team.id, admin.id, user.id, TeamRole.ADMIN)

    @pytest.mark.asyncio
    async def test_owner_role_never_assignable(self, db):
        owner = await create_user(db, "owner@acme.io")
        user = await create_user(db, "dev@acme.io")
        team = await create_team(db, owner)
        service = TeamService(db)

        with pytest.raises(ValidationError):
            await service.add_team_member(team.id, owner.id, user.id, TeamRole.OWNER)

        await add_member(db, team, user)
        with pytest.raises(ValidationError):
            await service.update_member_role(team.id, owner.id, user.id, TeamRole.OWNER)

    @pytest.mark.asyncio
    async def test_duplicate_member(self, db):
        owner = await create_user(db, "owner@acme.io")
        user = await create_user(db, "dev@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, user)

        with pytest.raises(ConflictError):
            await TeamService(db).add_team_member(team.id, owner.id, user.id)

    @pytest.mark.asyncio
    async def test_members_ordered_by_role(self, db):
        owner = await create_user(db, "owner@acme.io")
        member = await create_user(db, "member@acme.io")
        admin = await create_user(db, "admin@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, member)
        await add_member(db, team, admin, TeamRole.ADMIN)

        members = await TeamService(db).get_team_members(team.id)

        assert [m.role for m in members] == [TeamRole.OWNER, TeamRole.ADMIN, TeamRole.MEMBER]

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed_or_leave(self, db):
        owner = await create_user(db, "owner@acme.io")
        admin = await create_user(db, "admin@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, admin, TeamRole.ADMIN)
        service = TeamService(db)

        with pytest.raises(PermissionDenied):
            await service.remove_team_member(team.id, admin.id, owner.id)
        with pytest.raises(PermissionDenied):
            await service.leave_team(team.id, owner.id)

    @pytest.mark.asyncio
    async def test_admin_removes_only_members(self, db):
        owner = await create_user(db, "owner@acme.io")
        admin = await create_user(db, "admin@acme.io")
        other_admin = await create_user(db, "admin2@acme.io")
        member = await create_user(db, "member@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, admin, TeamRole.ADMIN)
        await add_member(db, team, other_admin, TeamRole.ADMIN)
        await add_member(db, team, member)
        service = TeamService(db)

        with pytest.raises(PermissionDenied):
            await service.remove_team_member(team.id, admin.id, other_admin.id)

        await service.remove_team_member(team.id, admin.id, member.id)
        assert not await service.authorizer.is_member(member.id, team.id)

    @pytest.mark.asyncio
    async def test_role_change_requires_owner(self, db):
        owner = await create_user(db, "owner@acme.io")
        admin = await create_user(db, "admin@acme.io")
        member = await create_user(db, "member@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, admin, TeamRole.ADMIN)
        await add_member(db, team, member)
        service = TeamService(db)

        with pytest.raises(PermissionDenied):
            await service.update_member_role(team.id, admin.id, member.id, TeamRole.ADMIN)

        promoted = await service.update_member_role(team.id, owner.id, member.id, TeamRole.ADMIN)
        assert promoted.role == TeamRole.ADMIN

    @pytest.mark.asyncio
    async def test_leave_team(self, db):
        owner = await create_user(db, "owner@acme.io")
        member = await create_user(db, "member@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, member)
        service = TeamService(db)

        await service.leave_team(team.id, member.id)

        with pytest.raises(NotFoundError):
            await service.leave_team(team.id, member.id)


# ==================== Unified invite ==================== #

class TestInviteMember:
    """Test channel selection of the unified invite."""

    @pytest.mark.asyncio
    async def test_unknown_email_gets_email_invitation(self, db, email_service):
        owner = await create_user(db, "owner@acme.io")
        team = await create_team(db, owner)

        result = await TeamService(db, email_service).invite_member(team.id, owner.id, "New.Hire@acme.io")

        assert result["type"] == "email_invitation"
        assert result["email_invitation"].email == "new.hire@acme.io"
        email_service.send_team_invitation_async.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_same_domain_user_added_directly(self, db, email_service):
        owner = await create_user(db, "owner@acme.io")
        user = await create_user(db, "dev@acme.io", first_name="Dana", last_name="Dev")
        team = await create_team(db, owner)

        result = await TeamService(db, email_service).invite_member(team.id, owner.id, "dev@acme.io")

        assert result["type"] == "direct"
        assert result["message"] == "Dana Dev was added to the team"
        assert result["member"].user_id == user.id
        email_service.send_team_invitation_async.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_domain_user_gets_in_app_invitation(self, db, email_service):
        owner = await create_user(db, "owner@acme.io")
        user = await create_user(db, "freelancer@globex.com")
        team = await create_team(db, owner)

        result = await TeamService(db, email_service).invite_member(team.id, owner.id, "freelancer@globex.com")

        assert result["type"] == "internal_invitation"
        assert result["invitation"].receiver_id == user.id
        assert not await TeamService(db).authorizer.is_member(user.id, team.id)

    @pytest.mark.asyncio
    async def test_free_provider_never_matches_directly(self, db, email_service):
        owner = await create_user(db, "owner@gmail.com")
        await create_user(db, "friend@gmail.com")
        team = await create_team(db, owner)

        result = await TeamService(db, email_service).invite_member(team.id, owner.id, "friend@gmail.com")

        assert result["type"] == "internal_invitation"

    @pytest.mark.asyncio
    async def test_username_invite(self, db, email_service):
        owner = await create_user(db, "owner@acme.io")
        await create_user(db, "x@globex.com", username="globex_dev")
        team = await create_team(db, owner)
        service = TeamService(db, email_service)

        result = await service.invite_member(team.id, owner.id, "globex_dev", message="Join us")

        assert result["type"] == "internal_invitation"
        assert result["invitation"].message == "Join us"

        with pytest.raises(NotFoundError):
            await service.invite_member(team.id, owner.id, "ghost")

    @pytest.mark.asyncio
    async def test_member_cannot_invite(self, db, email_service):
        owner = await create_user(db, "owner@acme.io")
        member = await create_user(db, "member@acme.io")
        team = await create_team(db, owner)
        await add_member(db, team, member)

        with pytest.raises(PermissionDenied):
            await TeamService(db, email_service).invite_member(team.id, member.id, "new@acme.io")

        assert (await db.execute(select(EmailInvitation))).first() is None
        assert (await db.execute(select(Invitation))).first() is None

    @pytest.mark.asyncio
    async def test_owner_role_rejected(self, db, email_service):
        owner = await create_user(db, "owner@acme.io")
        team = await create_team(db, owner)

        with pytest.raises(ValidationError):
            await TeamService(db, email_service).invite_member(
                team.id, owner.id, "new@acme.io", role=TeamRole.OWNER
            )


# ==================== Suggestions ==================== #

class TestSuggestedMembers:

    @pytest.mark.asyncio
    async def test_ranks_non_members_above_threshold(self, db):
        owner = await create_user(db, "owner@acme.io")
        good = await create_user(
            db, "good@globex.com", job_title="Backend Engineer", bio="I write backend services"
        )
        await create_user(db, "weak@globex.com", job_title="Chef")
        team = await create_team(db, owner, name="Backend Guild", description="Backend services")

        suggestions = await TeamService(db).get_suggested_members(team.id, owner.id)

        assert [s["user"].id for s in suggestions] == [good.id]
        assert suggestions[0]["score"] >= 10
        assert "Role: Backend Engineer" in suggestions[0]["match_reason"]

    @pytest.mark.asyncio
    async def test_non_member_denied(self, db):
        owner = await create_user(db, "owner@acme.io")
        stranger = await create_user(db, "x@globex.com")
        team = await create_team(db, owner)

        with pytest.raises(PermissionDenied):
            await TeamService(db).get_suggested_members(team.id, stranger.id)
