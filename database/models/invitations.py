import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    Text,
    Uuid,
    func,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)

from core.utils.datetime import now
from database.engine import Base
from database.models.teams import TeamRole

if TYPE_CHECKING:
    from database.models.teams import Team
    from database.models.users import User


# ==================== Enums ===================== #
class InvitationStatus(str, PyEnum):
    """Status of in-app invitations. Only PENDING can transition."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class EmailInvitationStatus(str, PyEnum):
    """Status of invitations sent to an email address."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


# ==================== Invitations ===================== #
class Invitation(Base):
    """Invitation from a team owner/admin to an existing user."""

    __tablename__: str = "invitations"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[TeamRole] = mapped_column(
        SQLEnum(TeamRole, native_enum=False, length=50),
        nullable=False,
        default=TeamRole.MEMBER,
    )
    message: Mapped[str | None] = mapped_column(Text)
    status: Mapped[InvitationStatus] = mapped_column(
        SQLEnum(InvitationStatus, native_enum=False, length=50),
        nullable=False,
        default=InvitationStatus.PENDING,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now,
        server_default=func.now(),
        onupdate=now,
    )

    team: Mapped["Team"] = relationship("Team")
    sender: Mapped["User"] = relationship("User", foreign_keys=[sender_id])
    receiver: Mapped["User"] = relationship("User", foreign_keys=[receiver_id])

    __table_args__ = (
        Index("idx_invitations_receiver_status", "receiver_id", "status"),
        Index("idx_invitations_team_status", "team_id", "status"),
    )


class EmailInvitation(Base):
    """Invitation for someone without an account, redeemed with a bearer token."""

    __tablename__: str = "email_invitations"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    invited_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[TeamRole] = mapped_column(
        SQLEnum(TeamRole, native_enum=False, length=50),
        nullable=False,
        default=TeamRole.MEMBER,
    )
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    status: Mapped[EmailInvitationStatus] = mapped_column(
        SQLEnum(EmailInvitationStatus, native_enum=False, length=50),
        nullable=False,
        default=EmailInvitationStatus.PENDING,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now,
        server_default=func.now(),
        onupdate=now,
    )

    team: Mapped["Team"] = relationship("Team")
    invited_by: Mapped["User"] = relationship("User")

    __table_args__ = (
        UniqueConstraint("email", "team_id", name="uq_email_invitations_email_team"),
        Index("idx_email_invitations_status_expires", "status", "expires_at"),
    )
