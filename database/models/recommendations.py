import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    ForeignKey,
    DateTime,
    Integer,
    Text,
    Uuid,
    func,
    Enum as SQLEnum,
    Index,
)

from core.utils.datetime import now
from database.engine import Base

if TYPE_CHECKING:
    from database.models.teams import Team, Project
    from database.models.users import User, Portfolio

# Message used by the "like" button; exempt from the one-recommendation rule
LIKE_MESSAGE = "Liked this work"


class RecommendationType(str, PyEnum):
    REQUEST = "REQUEST"
    GIVEN = "GIVEN"


class RecommendationStatus(str, PyEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Recommendation(Base):
    """
    Peer recommendation, optionally scoped to a portfolio, a team project or a
    team.
    """

    __tablename__: str = "recommendations"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[RecommendationType] = mapped_column(
        SQLEnum(RecommendationType, native_enum=False, length=50),
        nullable=False,
        default=RecommendationType.REQUEST,
    )
    status: Mapped[RecommendationStatus] = mapped_column(
        SQLEnum(RecommendationStatus, native_enum=False, length=50),
        nullable=False,
        default=RecommendationStatus.PENDING,
    )
    rating: Mapped[int | None] = mapped_column(Integer)
    portfolio_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=True, index=True
    )
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    team_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
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

    sender: Mapped["User"] = relationship("User", foreign_keys=[sender_id])
    receiver: Mapped["User"] = relationship("User", foreign_keys=[receiver_id])
    portfolio: Mapped["Portfolio | None"] = relationship("Portfolio")
    project: Mapped["Project | None"] = relationship("Project")
    team: Mapped["Team | None"] = relationship("Team")

    __table_args__ = (
        Index("idx_recommendations_sender_receiver", "sender_id", "receiver_id"),
    )
