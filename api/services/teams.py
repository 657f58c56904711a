"""Team service functions."""

import logging
import math
import uuid
from typing import Any, Optional

from sqlalchemy import select, func, or_, case, delete
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from api.services.email_invitations import EmailInvitationService
from api.services.invitations import InvitationService
from core.exceptions import (
    ValidationError,
    PermissionDenied,
    NotFoundError,
    ConflictError,
)
from core.integrations.email import EmailService
from core.utils.datetime import now, to_unix_millis, to_base36
from core.utils.email_validator import extract_email_domain, is_valid_email_format, FREE_EMAIL_PROVIDERS
from core.utils.formatting import slugify
from core.utils.keywords import (
    ExperienceProfile,
    MatchProfile,
    extract_team_keywords,
    calculate_match_score,
    generate_match_reason,
)
from database.models import (
    Team,
    TeamMember,
    TeamRole,
    TeamType,
    SubTeamCategory,
    User,
    UserSkill,
    MANAGER_ROLES,
)

logger = logging.getLogger(__name__)

SUGGESTION_CANDIDATE_LIMIT = 100
SUGGESTION_MIN_SCORE = 10
SUGGESTION_LIMIT = 10

_MEMBER_ORDER = case(
    (TeamMember.role == TeamRole.OWNER, 0),
    (TeamMember.role == TeamRole.ADMIN, 1),
    else_=2,
)


def _team_options():
    return (
        selectinload(Team.owner),
        selectinload(Team.members).selectinload(TeamMember.user),
        selectinload(Team.sub_teams),
        selectinload(Team.parent_team),
    )


def _member_count_subquery():
    return (
        select(func.count(TeamMember.id))
        .where(TeamMember.team_id == Team.id)
        .correlate(Team)
        .scalar_subquery()
    )


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class TeamService(BaseService):
    """
    Team lifecycle, the two-level team hierarchy and membership management.

    Args:
        db: Database session
        email_service: Used by the unified invite when it falls through to an
            email invitation
    """

    def __init__(self, db, email_service: Optional[EmailService] = None):
        super().__init__(db)
        self.email_service = email_service

    # ==================== Helpers ==================== #

    async def _unique_slug(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> str:
        """
        Slug derived from the name. Collisions get a base36 timestamp suffix,
        retried until free.
        """
        base = slugify(name) or "team"
        candidate = base
        attempt = 0
        while True:
            query = select(Team.id).where(Team.slug == candidate)
            if exclude_id is not None:
                query = query.where(Team.id != exclude_id)
            taken = (await self.db.execute(query)).first()
            if taken is None:
                return candidate
            candidate = f"{base}-{to_base36(to_unix_millis(now()) + attempt)}"
            attempt += 1

    async def _load_team(self, team_id: uuid.UUID) -> Team:
        return await self._get_or_404(Team, team_id, "Team not found", _team_options())

    async def _get_user(self, user_id: uuid.UUID) -> User:
        return await self._get_or_404(User, user_id, "User not found")

    async def _load_member(self, member_id: uuid.UUID) -> TeamMember:
        result = await self.db.execute(
            select(TeamMember)
            .options(selectinload(TeamMember.user))
            .where(TeamMember.id == member_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # ==================== Teams ==================== #

    async def create_team(
        self,
        owner_id: uuid.UUID,
        name: str,
        description: Optional[str] = None,
        team_type: TeamType = TeamType.TEAM,
        avatar: Optional[str] = None,
        city: Optional[str] = None,
        parent_team_id: Optional[uuid.UUID] = None,
        sub_team_category: Optional[SubTeamCategory] = None,
    ) -> Team:
        """
        Create a team and make the creator its OWNER member.

        Args:
            owner_id: Creating user
            name: Team name; the slug is derived from it
            description: Optional description
            team_type: Team type
            avatar: Optional avatar URL
            city: Optional city
            parent_team_id: Parent main team when creating a sub-team
            sub_team_category: Department category of a sub-team

        Returns:
            The created team with owner, members and hierarchy loaded
        """
        if parent_team_id is not None:
            parent = await self._get(Team, parent_team_id)
            if parent is None:
                raise NotFoundError("Parent team not found")
            await self.authorizer.require_manager(
                owner_id, parent_team_id, "Only admins can create sub-teams"
            )
            if not parent.is_main_team:
                raise ValidationError("Sub-teams can only be created under main teams")

        team = Team(
            name=name,
            slug=await self._unique_slug(name),
            description=description,
            type=team_type,
            avatar=avatar,
            city=city,
            owner_id=owner_id,
            parent_team_id=parent_team_id,
            sub_team_category=sub_team_category if parent_team_id else None,
        )
        self.db.add(team)
        await self.db.flush()

        self.db.add(TeamMember(user_id=owner_id, team_id=team.id, role=TeamRole.OWNER))
        await self.db.commit()

        logger.info(f"Team created: {team.id} (slug={team.slug}, parent={parent_team_id})")
        return await self._load_team(team.id)

    async def create_sub_team(
        self,
        parent_team_id: uuid.UUID,
        user_id: uuid.UUID,
        **data: Any,
    ) -> Team:
        return await self.create_team(user_id, parent_team_id=parent_team_id, **data)

    async def get_team(self, identifier: str) -> Team:
        """
        Fetch a team by id or slug.

        Args:
            identifier: UUID string or slug

        Returns:
            Team with owner, members and hierarchy loaded
        """
        team_id = _parse_uuid(identifier)
        query = select(Team).options(*_team_options()).execution_options(populate_existing=True)
        if team_id is not None:
            query = query.where(Team.id == team_id)
        else:
            query = query.where(Team.slug == identifier)

        team = (await self.db.execute(query)).scalar_one_or_none()
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def update_team(self, team_id: uuid.UUID, user_id: uuid.UUID, data: dict) -> Team:
        team = await self._get_or_404(Team, team_id, "Team not found")
        if team.owner_id != user_id:
            raise PermissionDenied("Only team owner can update team details")
        if data.get("sub_team_category") is not None and team.is_main_team:
            raise ValidationError("Only sub-teams can have a category")

        if data.get("name") and data["name"] != team.name:
            team.slug = await self._unique_slug(data["name"], exclude_id=team.id)

        for field in ("name", "description", "type", "avatar", "city", "sub_team_category"):
            if field in data:
                setattr(team, field, data[field])

        await self.db.commit()
        logger.info(f"Team updated: {team_id}")
        return await self._load_team(team_id)

    async def delete_team(self, team_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Delete a team; members, invitations, jobs and sub-teams go with it."""
        team = await self._get_or_404(Team, team_id, "Team not found")
        if team.owner_id != user_id:
            raise PermissionDenied("Only team owner can delete the team")

        await self.db.execute(delete(Team).where(Team.id == team_id))
        await self.db.commit()
        logger.info(f"Team deleted: {team_id}")

    async def search_teams(
        self,
        search: Optional[str] = None,
        team_type: Optional[TeamType] = None,
        city: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        """
        Search main teams, newest first.

        Returns:
            Dict with teams (each with member_count) and pagination
        """
        filters = [Team.is_main_team]
        if team_type is not None:
            filters.append(Team.type == team_type)
        if city:
            filters.append(Team.city.ilike(f"%{city}%"))
        if search:
            filters.append(or_(
                Team.name.ilike(f"%{search}%"),
                Team.description.ilike(f"%{search}%"),
            ))

        total = (await self.db.execute(
            select(func.count()).select_from(Team).where(*filters)
        )).scalar_one()

        rows = (await self.db.execute(
            select(Team, _member_count_subquery())
            .options(selectinload(Team.owner))
            .where(*filters)
            .order_by(Team.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )).all()

        return {
            "teams": [{"team": team, "member_count": count} for team, count in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def get_user_teams(self, user_id: uuid.UUID) -> list[dict]:
        """Main teams the user belongs to, with the user's role in each."""
        result = await self.db.execute(
            select(TeamMember)
            .join(Team, TeamMember.team_id == Team.id)
            .options(selectinload(TeamMember.team).selectinload(Team.owner))
            .where(TeamMember.user_id == user_id, Team.is_main_team)
            .order_by(TeamMember.joined_at.desc())
        )
        return [
            {"team": m.team, "role": m.role, "joined_at": m.joined_at}
            for m in result.scalars().all()
        ]

    async def get_sub_teams(self, team_id: uuid.UUID) -> list[dict]:
        await self._get_or_404(Team, team_id, "Team not found")
        rows = (await self.db.execute(
            select(Team, _member_count_subquery())
            .options(selectinload(Team.owner))
            .where(Team.parent_team_id == team_id)
            .order_by(Team.created_at)
        )).all()
        return [{"team": team, "member_count": count} for team, count in rows]

    # ==================== Members ==================== #

    async def get_team_members(self, team_id: uuid.UUID) -> list[TeamMember]:
        """Members ordered OWNER, ADMIN, MEMBER, then by join time."""
        await self._get_or_404(Team, team_id, "Team not found")
        result = await self.db.execute(
            select(TeamMember)
            .options(selectinload(TeamMember.user))
            .where(TeamMember.team_id == team_id)
            .order_by(_MEMBER_ORDER, TeamMember.joined_at)
        )
        return list(result.scalars().all())

    async def add_team_member(
        self,
        team_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        user_id: uuid.UUID,
        role: TeamRole = TeamRole.MEMBER,
    ) -> TeamMember:
        """
        Add a user to a team directly.

        Raises:
            NotFoundError: Team or user does not exist
            PermissionDenied: Caller is not owner/admin, or a non-owner assigns ADMIN
            ValidationError: Role OWNER requested
            ConflictError: User is already a member
        """
        await self._get_or_404(Team, team_id, "Team not found")
        acting_role = await self.authorizer.require_manager(
            acting_user_id, team_id, "Only team owners and admins can add members"
        )
        if role != TeamRole.MEMBER and acting_role != TeamRole.OWNER:
            raise PermissionDenied("Only team owner can assign admin or owner roles")
        if role == TeamRole.OWNER:
            raise ValidationError("A team can only have one owner")

        await self._get_user(user_id)
        if await self.authorizer.is_member(user_id, team_id):
            raise ConflictError("User is already a team member")

        member = TeamMember(user_id=user_id, team_id=team_id, role=role)
        self.db.add(member)
        await self.db.commit()

        logger.info(f"Member {user_id} added to team {team_id} as {role.value} by {acting_user_id}")
        return await self._load_member(member.id)

    async def remove_team_member(
        self,
        team_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> None:
        team = await self._get_or_404(Team, team_id, "Team not found")
        if team.owner_id == user_id:
            raise PermissionDenied("Cannot remove team owner")

        acting_role = await self.authorizer.require_manager(
            acting_user_id, team_id, "Only team owners and admins can remove members"
        )

        member = await self.authorizer.get_membership(user_id, team_id)
        if member is None:
            raise NotFoundError("Member not found in team")
        if member.role == TeamRole.OWNER:
            raise PermissionDenied("Cannot remove team owner")
        if acting_role == TeamRole.ADMIN and member.role != TeamRole.MEMBER:
            raise PermissionDenied("Admins can only remove regular members")

        await self.db.delete(member)
        await self.db.commit()
        logger.info(f"Member {user_id} removed from team {team_id} by {acting_user_id}")

    async def update_member_role(
        self,
        team_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        user_id: uuid.UUID,
        role: TeamRole,
    ) -> TeamMember:
        team = await self._get_or_404(Team, team_id, "Team not found")
        if not await self.authorizer.is_owner(acting_user_id, team_id):
            raise PermissionDenied("Only team owner can update member roles")
        if team.owner_id == user_id:
            raise PermissionDenied("Cannot change owner role")
        if role == TeamRole.OWNER:
            raise ValidationError("Ownership cannot be assigned through a role change")

        member = await self.authorizer.get_membership(user_id, team_id)
        if member is None:
            raise NotFoundError("Member not found in team")
        if member.role == TeamRole.OWNER:
            raise PermissionDenied("Cannot change owner role")

        member.role = role
        await self.db.commit()
        logger.info(f"Member {user_id} role in team {team_id} set to {role.value}")
        return await self._load_member(member.id)

    async def leave_team(self, team_id: uuid.UUID, user_id: uuid.UUID) -> None:
        team = await self._get_or_404(Team, team_id, "Team not found")
        if team.owner_id == user_id:
            raise PermissionDenied("Team owner cannot leave the team")

        member = await self.authorizer.get_membership(user_id, team_id)
        if member is None:
            raise NotFoundError("You are not a member of this team")

        await self.db.delete(member)
        await self.db.commit()
        logger.info(f"User {user_id} left team {team_id}")

    # ==================== Suggestions ==================== #

    async def get_suggested_members(self, team_id: uuid.UUID, user_id: uuid.UUID) -> list[dict]:
        """
        Rank non-members against the team's keywords.

        Returns:
            Up to ten dicts of user, score and match_reason, best first
        """
        team = await self._get_or_404(Team, team_id, "Team not found")
        if not await self.authorizer.is_member(user_id, team_id):
            raise PermissionDenied("Only team members can view suggested members")

        team_keywords = extract_team_keywords(
            team.name,
            team.description,
            team.type.value,
            team.sub_team_category.value if team.sub_team_category else None,
        )

        member_ids = select(TeamMember.user_id).where(TeamMember.team_id == team_id)
        result = await self.db.execute(
            select(User)
            .options(
                selectinload(User.skills).selectinload(UserSkill.skill),
                selectinload(User.work_experiences),
            )
            .where(User.id.not_in(member_ids), User.is_active.is_(True))
            .limit(SUGGESTION_CANDIDATE_LIMIT)
        )

        suggestions = []
        for candidate in result.scalars().all():
            profile = MatchProfile(
                bio=candidate.bio,
                job_title=candidate.job_title,
                location=candidate.location,
                skills=[s.skill.name for s in candidate.skills],
                experiences=[
                    ExperienceProfile(role=exp.title, description=exp.description)
                    for exp in candidate.work_experiences
                ],
            )
            score = calculate_match_score(team_keywords, profile, team.city)
            if score >= SUGGESTION_MIN_SCORE:
                suggestions.append({
                    "user": candidate,
                    "score": score,
                    "match_reason": generate_match_reason(team_keywords, profile),
                })

        suggestions.sort(key=lambda s: s["score"], reverse=True)
        return suggestions[:SUGGESTION_LIMIT]

    # ==================== Unified invite ==================== #

    async def _manager_domains(self, team_id: uuid.UUID) -> set[str]:
        result = await self.db.execute(
            select(User.email)
            .join(TeamMember, TeamMember.user_id == User.id)
            .where(TeamMember.team_id == team_id, TeamMember.role.in_(MANAGER_ROLES))
        )
        return {
            domain
            for domain in (extract_email_domain(email) for email in result.scalars().all())
            if domain and domain not in FREE_EMAIL_PROVIDERS
        }

    async def invite_member(
        self,
        team_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        identifier: str,
        role: TeamRole = TeamRole.MEMBER,
        message: Optional[str] = None,
    ) -> dict:
        """
        Invite someone by email or username, picking the right channel.

        An existing user whose company domain matches a team owner/admin is
        added directly. Any other existing user gets an in-app invitation. An
        email with no account gets an email invitation.

        Args:
            team_id: Team to invite into
            acting_user_id: Owner or admin sending the invite
            identifier: Email address or username
            role: ADMIN or MEMBER
            message: Optional note for in-app invitations

        Returns:
            Dict with type ("direct", "internal_invitation" or
            "email_invitation"), message and the created record
        """
        if role not in (TeamRole.ADMIN, TeamRole.MEMBER):
            raise ValidationError("Role must be ADMIN or MEMBER")

        await self._get_or_404(Team, team_id, "Team not found")
        await self.authorizer.require_manager(
            acting_user_id, team_id, "Only team owners and admins can send invitations"
        )

        identifier = identifier.strip()
        if "@" in identifier:
            email = identifier.lower()
            user = (await self.db.execute(
                select(User).where(func.lower(User.email) == email)
            )).scalar_one_or_none()

            if user is None:
                if not is_valid_email_format(email):
                    raise ValidationError("Invalid email format")
                invitation = await EmailInvitationService(
                    self.db, self.email_service
                ).send_email_invitation(team_id, acting_user_id, email, role)
                return {
                    "type": "email_invitation",
                    "message": f"Invitation email sent to {email}",
                    "email_invitation": invitation,
                }

            if extract_email_domain(user.email) in await self._manager_domains(team_id):
                member = await self.add_team_member(team_id, acting_user_id, user.id, role)
                return {
                    "type": "direct",
                    "message": f"{user.full_name} was added to the team",
                    "member": member,
                }
        else:
            user = (await self.db.execute(
                select(User).where(User.username == identifier)
            )).scalar_one_or_none()
            if user is None:
                raise NotFoundError("User not found")

        invitation = await InvitationService(self.db).send_invitation(
            acting_user_id, team_id, user.id, role, message
        )
        return {
            "type": "internal_invitation",
            "message": f"Invitation sent to {user.full_name}",
            "invitation": invitation,
        }
