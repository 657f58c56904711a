"""
Email invitation service functions.

Invitations for people without an account. The invitee receives a link with
a bearer token; after registering they redeem it to join the team.
"""

import logging
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy import select, update, func, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from core.config import settings
from core.exceptions import (
    ValidationError,
    PermissionDenied,
    ConflictError,
    EmailDeliveryError,
)
from core.integrations.email import EmailService
from core.security import generate_invitation_token
from core.utils.datetime import now, is_past
from core.utils.email_validator import validate_company_email
from core.utils.formatting import mask_email
from database.models import (
    EmailInvitation,
    EmailInvitationStatus,
    Team,
    TeamMember,
    TeamRole,
    User,
)

logger = logging.getLogger(__name__)

_INVITATION_OPTIONS = (
    selectinload(EmailInvitation.team),
    selectinload(EmailInvitation.invited_by),
)

_TERMINAL_MESSAGES = {
    EmailInvitationStatus.ACCEPTED: "This invitation has already been accepted",
    EmailInvitationStatus.CANCELLED: "This invitation has been cancelled",
    EmailInvitationStatus.EXPIRED: "This invitation has expired",
}


class EmailInvitationService(BaseService):
    """
    Args:
        db: Database session
        email_service: Sends the invitation email
    """

    def __init__(self, db: AsyncSession, email_service: Optional[EmailService] = None):
        super().__init__(db)
        self.email_service = email_service or EmailService()

    async def _load(self, invitation_id: uuid.UUID) -> EmailInvitation:
        return await self._get_or_404(
            EmailInvitation, invitation_id, "Invitation not found", _INVITATION_OPTIONS
        )

    async def send_email_invitation(
        self,
        team_id: uuid.UUID,
        invited_by_id: uuid.UUID,
        email: str,
        role: TeamRole = TeamRole.MEMBER,
    ) -> EmailInvitation:
        """
        Create an email invitation and send the email.

        If the email cannot be sent the invitation row is deleted again.

        Args:
            team_id: Team to invite into
            invited_by_id: Owner or admin sending the invitation
            email: Invitee address; must pass the company email rule
            role: Role granted on acceptance

        Returns:
            The PENDING invitation

        Raises:
            NotFoundError: Team does not exist
            PermissionDenied: Inviter is not owner/admin
            ValidationError: Address fails the company email rule
            ConflictError: A live invitation for this address already exists
            EmailDeliveryError: Email could not be sent
        """
        email = email.strip().lower()
        if role == TeamRole.OWNER:
            raise ValidationError("Cannot invite a user as team owner")

        team = await self._get_or_404(Team, team_id, "Team not found")
        inviter_role = await self.authorizer.require_manager(
            invited_by_id, team_id, "Only team owners and admins can send invitations"
        )
        if role == TeamRole.ADMIN and inviter_role != TeamRole.OWNER:
            raise PermissionDenied("Only team owner can assign admin or owner roles")

        validation = await validate_company_email(self.db, email, team_id)
        if not validation.valid:
            raise ValidationError(validation.error)

        member_exists = (await self.db.execute(
            select(TeamMember.id)
            .join(User, TeamMember.user_id == User.id)
            .where(TeamMember.team_id == team_id, func.lower(User.email) == email)
        )).first()
        if member_exists:
            raise ConflictError("User is already a team member")

        existing = (await self.db.execute(
            select(EmailInvitation).where(
                EmailInvitation.email == email,
                EmailInvitation.team_id == team_id,
            )
        )).scalar_one_or_none()
        previous = None
        if existing is not None:
            if existing.status == EmailInvitationStatus.PENDING and not is_past(existing.expires_at):
                raise ConflictError("An invitation to this email for this team already exists")
            # Resend after the previous invitation was resolved; restored if the email fails
            previous = {
                attr.key: getattr(existing, attr.key)
                for attr in inspect(EmailInvitation).column_attrs
            }
            await self.db.delete(existing)
            await self.db.flush()

        inviter = await self._get_or_404(User, invited_by_id, "User not found")
        invitation = EmailInvitation(
            email=email,
            team_id=team_id,
            invited_by_id=invited_by_id,
            role=role,
            token=generate_invitation_token(),
            status=EmailInvitationStatus.PENDING,
            expires_at=now() + timedelta(days=settings.invitation_expire_days),
        )
        self.db.add(invitation)
        await self.db.commit()

        try:
            sent = await self.email_service.send_team_invitation_async(
                to_email=email,
                inviter_name=inviter.full_name,
                team_name=team.name,
                token=invitation.token,
                role=role.value,
            )
        except Exception as e:
            await self._discard_unsent(invitation, previous)
            raise EmailDeliveryError("Failed to send invitation email") from e
        if not sent:
            await self._discard_unsent(invitation, previous)
            raise EmailDeliveryError("Failed to send invitation email")

        logger.info(f"Email invitation sent: {invitation.id} (team={team_id})")
        return await self._load(invitation.id)

    async def _discard_unsent(self, invitation: EmailInvitation, previous: Optional[dict]) -> None:
        """Remove an invitation whose email failed and put back the row it replaced."""
        logger.error(
            f"Invitation email to {mask_email(invitation.email)} failed, "
            f"removing email invitation {invitation.id}"
        )
        await self.db.delete(invitation)
        await self.db.flush()
        if previous is not None:
            self.db.add(EmailInvitation(**previous))
        await self.db.commit()

    async def validate_invitation_token(self, token: str) -> EmailInvitation:
        """
        Look up a token and check it can still be redeemed.

        A PENDING invitation past its expiry is marked EXPIRED here.

        Raises:
            ValidationError: Unknown, expired, accepted or cancelled token
        """
        invitation = (await self.db.execute(
            select(EmailInvitation)
            .options(*_INVITATION_OPTIONS)
            .where(EmailInvitation.token == token)
            .execution_options(populate_existing=True)
        )).scalar_one_or_none()
        if invitation is None:
            raise ValidationError("Invalid invitation token")

        if invitation.status in _TERMINAL_MESSAGES:
            raise ValidationError(_TERMINAL_MESSAGES[invitation.status])

        if is_past(invitation.expires_at):
            invitation.status = EmailInvitationStatus.EXPIRED
            await self.db.commit()
            logger.info(f"Email invitation expired on read: {invitation.id}")
            raise ValidationError("This invitation has expired")

        return invitation

    async def accept_invitation(self, token: str, user_id: uuid.UUID) -> dict:
        """
        Redeem a token: join the team with the invitation's role.

        Returns:
            Dict with success flag and the team
        """
        invitation = await self.validate_invitation_token(token)

        if await self.authorizer.is_member(user_id, invitation.team_id):
            raise ConflictError("You are already a member of this team")

        self.db.add(TeamMember(user_id=user_id, team_id=invitation.team_id, role=invitation.role))
        invitation.status = EmailInvitationStatus.ACCEPTED
        invitation.accepted_at = now()
        await self.db.commit()

        logger.info(f"Email invitation accepted: {invitation.id} by user {user_id}")
        team = await self._get_or_404(Team, invitation.team_id, "Team not found")
        return {"success": True, "team": team}

    async def cancel_invitation(self, invitation_id: uuid.UUID, user_id: uuid.UUID) -> EmailInvitation:
        """Cancel a PENDING invitation. Allowed for the inviter and team owners/admins."""
        invitation = await self._load(invitation_id)
        if invitation.invited_by_id != user_id and not await self.authorizer.can_manage(
            user_id, invitation.team_id
        ):
            raise PermissionDenied("You do not have permission to cancel this invitation")
        if invitation.status != EmailInvitationStatus.PENDING:
            raise ConflictError(f"Invitation is already {invitation.status.value.lower()}")

        invitation.status = EmailInvitationStatus.CANCELLED
        await self.db.commit()
        logger.info(f"Email invitation cancelled: {invitation_id}")
        return await self._load(invitation_id)

    async def get_team_invitations(self, team_id: uuid.UUID, user_id: uuid.UUID) -> list[EmailInvitation]:
        """Pending invitations of a team, newest first."""
        await self._get_or_404(Team, team_id, "Team not found")
        await self.authorizer.require_manager(
            user_id, team_id, "Only team owners and admins can view team invitations"
        )
        result = await self.db.execute(
            select(EmailInvitation)
            .options(*_INVITATION_OPTIONS)
            .where(
                EmailInvitation.team_id == team_id,
                EmailInvitation.status == EmailInvitationStatus.PENDING,
            )
            .order_by(EmailInvitation.created_at.desc())
        )
        return list(result.scalars().all())

    async def check_existing_invitation(self, team_id: uuid.UUID, email: str) -> Optional[EmailInvitation]:
        invitation = (await self.db.execute(
            select(EmailInvitation).options(*_INVITATION_OPTIONS).where(
                EmailInvitation.team_id == team_id,
                EmailInvitation.email == email.strip().lower(),
                EmailInvitation.status == EmailInvitationStatus.PENDING,
            )
        )).scalar_one_or_none()
        if invitation is None or is_past(invitation.expires_at):
            return None
        return invitation

    async def cleanup_expired_invitations(self) -> int:
        """
        Mark every overdue PENDING email invitation as EXPIRED.

        Returns:
            Number of invitations updated
        """
        result = await self.db.execute(
            update(EmailInvitation)
            .where(
                EmailInvitation.status == EmailInvitationStatus.PENDING,
                EmailInvitation.expires_at < now(),
            )
            .values(status=EmailInvitationStatus.EXPIRED, updated_at=now())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        if result.rowcount:
            logger.info(f"Marked {result.rowcount} email invitations as expired")
        return result.rowcount
