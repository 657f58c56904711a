"""In-app invitation service functions."""

import logging
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from core.config import settings
from core.exceptions import (
    ValidationError,
    PermissionDenied,
    NotFoundError,
    ConflictError,
    GoneError,
)
from core.utils.datetime import now, is_past
from database.models import (
    Invitation,
    InvitationStatus,
    Team,
    TeamMember,
    TeamRole,
    User,
)

logger = logging.getLogger(__name__)

INVITATION_OPTIONS = (
    selectinload(Invitation.team),
    selectinload(Invitation.sender),
    selectinload(Invitation.receiver),
)


class InvitationService(BaseService):
    """
    Invitations between registered users.

    PENDING is the only state that can transition; ACCEPTED, DECLINED,
    CANCELLED and EXPIRED are terminal.
    """

    async def _load(self, invitation_id: uuid.UUID) -> Invitation:
        return await self._get_or_404(
            Invitation, invitation_id, "Invitation not found", INVITATION_OPTIONS
        )

    @staticmethod
    def _require_pending(invitation: Invitation, action: str) -> None:
        if invitation.status != InvitationStatus.PENDING:
            raise ConflictError(
                f"Invitation is {invitation.status.value.lower()}, cannot {action}"
            )

    async def send_invitation(
        self,
        sender_id: uuid.UUID,
        team_id: uuid.UUID,
        receiver_id: uuid.UUID,
        role: TeamRole = TeamRole.MEMBER,
        message: Optional[str] = None,
    ) -> Invitation:
        """
        Invite an existing user to a team.

        Args:
            sender_id: Owner or admin of the team
            team_id: Team to join
            receiver_id: Invited user
            role: Role granted on acceptance (ADMIN or MEMBER)
            message: Optional note

        Returns:
            The PENDING invitation
        """
        if role == TeamRole.OWNER:
            raise ValidationError("Cannot invite a user as team owner")

        await self._get_or_404(Team, team_id, "Team not found")
        sender_role = await self.authorizer.require_manager(
            sender_id, team_id, "Only team owners and admins can send invitations"
        )
        if role == TeamRole.ADMIN and sender_role != TeamRole.OWNER:
            raise PermissionDenied("Only team owner can assign admin or owner roles")

        await self._get_or_404(User, receiver_id, "Recipient user not found")

        if await self.authorizer.is_member(receiver_id, team_id):
            raise ConflictError("User is already a team member")

        pending = (await self.db.execute(
            select(Invitation).where(
                Invitation.team_id == team_id,
                Invitation.receiver_id == receiver_id,
                Invitation.status == InvitationStatus.PENDING,
            )
        )).scalars().all()
        for existing in pending:
            if not is_past(existing.expires_at):
                raise ConflictError("Pending invitation already exists for this user")
            existing.status = InvitationStatus.EXPIRED

        invitation = Invitation(
            team_id=team_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            role=role,
            message=message,
            status=InvitationStatus.PENDING,
            expires_at=now() + timedelta(days=settings.invitation_expire_days),
        )
        self.db.add(invitation)
        await self.db.commit()

        logger.info(f"Invitation sent: {invitation.id} (team={team_id}, receiver={receiver_id})")
        return await self._load(invitation.id)

    async def get_invitation(self, invitation_id: uuid.UUID, user_id: uuid.UUID) -> Invitation:
        invitation = await self._load(invitation_id)
        if user_id not in (invitation.sender_id, invitation.receiver_id):
            raise PermissionDenied("You do not have access to this invitation")
        return invitation

    async def accept_invitation(self, invitation_id: uuid.UUID, user_id: uuid.UUID) -> Invitation:
        """
        Accept an invitation and join the team in one commit.

        Raises:
            PermissionDenied: Caller is not the receiver
            ConflictError: Invitation already resolved, or caller already a member
            GoneError: Invitation expired (it is marked EXPIRED)
        """
        invitation = await self._load(invitation_id)
        if invitation.receiver_id != user_id:
            raise PermissionDenied("Only the invitation recipient can accept it")
        self._require_pending(invitation, "accept")

        if is_past(invitation.expires_at):
            invitation.status = InvitationStatus.EXPIRED
            await self.db.commit()
            logger.info(f"Invitation expired on accept: {invitation_id}")
            raise GoneError("Invitation has expired")

        if await self.authorizer.is_member(user_id, invitation.team_id):
            raise ConflictError("You are already a member of this team")

        self.db.add(TeamMember(user_id=user_id, team_id=invitation.team_id, role=invitation.role))
        invitation.status = InvitationStatus.ACCEPTED
        await self.db.commit()

        logger.info(f"Invitation accepted: {invitation_id} (team={invitation.team_id})")
        return await self._load(invitation_id)

    async def decline_invitation(self, invitation_id: uuid.UUID, user_id: uuid.UUID) -> Invitation:
        invitation = await self._load(invitation_id)
        if invitation.receiver_id != user_id:
            raise PermissionDenied("Only the invitation recipient can decline it")
        self._require_pending(invitation, "decline")

        invitation.status = InvitationStatus.DECLINED
        await self.db.commit()
        logger.info(f"Invitation declined: {invitation_id}")
        return await self._load(invitation_id)

    async def cancel_invitation(self, invitation_id: uuid.UUID, user_id: uuid.UUID) -> Invitation:
        invitation = await self._load(invitation_id)
        if invitation.sender_id != user_id:
            raise PermissionDenied("Only the sender can cancel this invitation")
        self._require_pending(invitation, "cancel")

        invitation.status = InvitationStatus.CANCELLED
        await self.db.commit()
        logger.info(f"Invitation cancelled: {invitation_id}")
        return await self._load(invitation_id)

    async def get_received_invitations(
        self, user_id: uuid.UUID, status: Optional[InvitationStatus] = None
    ) -> list[Invitation]:
        query = select(Invitation).options(*INVITATION_OPTIONS).where(
            Invitation.receiver_id == user_id
        )
        if status is not None:
            query = query.where(Invitation.status == status)
        result = await self.db.execute(query.order_by(Invitation.created_at.desc()))
        return list(result.scalars().all())

    async def get_sent_invitations(
        self, user_id: uuid.UUID, status: Optional[InvitationStatus] = None
    ) -> list[Invitation]:
        query = select(Invitation).options(*INVITATION_OPTIONS).where(
            Invitation.sender_id == user_id
        )
        if status is not None:
            query = query.where(Invitation.status == status)
        result = await self.db.execute(query.order_by(Invitation.created_at.desc()))
        return list(result.scalars().all())

    async def get_team_invitations(
        self,
        team_id: uuid.UUID,
        user_id: uuid.UUID,
        status: Optional[InvitationStatus] = None,
    ) -> list[Invitation]:
        await self._get_or_404(Team, team_id, "Team not found")
        await self.authorizer.require_manager(
            user_id, team_id, "Only team owners and admins can view team invitations"
        )
        query = select(Invitation).options(*INVITATION_OPTIONS).where(
            Invitation.team_id == team_id
        )
        if status is not None:
            query = query.where(Invitation.status == status)
        result = await self.db.execute(query.order_by(Invitation.created_at.desc()))
        return list(result.scalars().all())

    async def mark_expired_invitations(self) -> int:
        """
        Flip overdue PENDING invitations to EXPIRED.

        Returns:
            Number of invitations updated
        """
        result = await self.db.execute(
            update(Invitation)
            .where(
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at < now(),
            )
            .values(status=InvitationStatus.EXPIRED, updated_at=now())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        if result.rowcount:
            logger.info(f"Marked {result.rowcount} invitations as expired")
        return result.rowcount
