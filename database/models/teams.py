import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy.ext.hybrid import hybrid_property
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

if TYPE_CHECKING:
    from database.models.users import User


# ==================== Enums ===================== #
class TeamType(str, PyEnum):
    """Kinds of teams."""

    TEAM = "TEAM"
    COMPANY = "COMPANY"
    ORGANIZATION = "ORGANIZATION"
    DEPARTMENT = "DEPARTMENT"


# Older clients still send the pre-migration type names
LEGACY_TEAM_TYPES: dict[str, TeamType] = {
    "PROJECT": TeamType.TEAM,
    "AGENCY": TeamType.ORGANIZATION,
    "STARTUP": TeamType.COMPANY,
}


class SubTeamCategory(str, PyEnum):
    """Department category of a sub-team."""

    ENGINEERING = "ENGINEERING"
    MARKETING = "MARKETING"
    DESIGN = "DESIGN"
    HR = "HR"
    SALES = "SALES"
    PRODUCT = "PRODUCT"
    OPERATIONS = "OPERATIONS"
    FINANCE = "FINANCE"
    LEGAL = "LEGAL"
    SUPPORT = "SUPPORT"
    OTHER = "OTHER"


class TeamRole(str, PyEnum):
    """Roles within a team."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


MANAGER_ROLES = (TeamRole.OWNER, TeamRole.ADMIN)


# ==================== Teams ===================== #
class Team(Base):
    """
    Team, company or organization. Teams form a two-level hierarchy: a main
    team has no parent, a sub-team points at a main team.
    """

    __tablename__: str = "teams"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    avatar: Mapped[str | None] = mapped_column(String(500))
    type: Mapped[TeamType] = mapped_column(
        SQLEnum(TeamType, native_enum=False, length=50),
        nullable=False,
        default=TeamType.TEAM,
    )
    sub_team_category: Mapped[SubTeamCategory | None] = mapped_column(
        SQLEnum(SubTeamCategory, native_enum=False, length=50), nullable=True
    )
    city: Mapped[str | None] = mapped_column(String(255))
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    parent_team_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=True, index=True
    )
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

    # Relationships
    owner: Mapped["User"] = relationship("User")
    parent_team: Mapped["Team | None"] = relationship(
        "Team", remote_side="Team.id", back_populates="sub_teams"
    )
    sub_teams: Mapped[list["Team"]] = relationship(
        "Team", back_populates="parent_team", cascade="all, delete-orphan", passive_deletes=True
    )
    members: Mapped[list["TeamMember"]] = relationship(
        "TeamMember", back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
    projects: Mapped[list["Project"]] = relationship(
        "Project", back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )

    @hybrid_property
    def is_main_team(self) -> bool:
        return self.parent_team_id is None

    @is_main_team.inplace.expression
    @classmethod
    def _is_main_team_expression(cls):
        return cls.parent_team_id.is_(None)

    __table_args__ = (
        Index("idx_teams_type_created", "type", "created_at"),
    )


class TeamMember(Base):
    """Membership of a user in a team, carrying the user's role."""

    __tablename__: str = "team_members"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[TeamRole] = mapped_column(
        SQLEnum(TeamRole, native_enum=False, length=50),
        nullable=False,
        default=TeamRole.MEMBER,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    user: Mapped["User"] = relationship("User", back_populates="team_memberships")
    team: Mapped["Team"] = relationship("Team", back_populates="members")

    __table_args__ = (
        UniqueConstraint("user_id", "team_id", name="uq_team_members_user_team"),
        Index("idx_team_members_team_role", "team_id", "role"),
    )


class Project(Base):
    """Work a team has delivered together."""

    __tablename__: str = "projects"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    team: Mapped["Team"] = relationship("Team", back_populates="projects")
