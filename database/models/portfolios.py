import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    Uuid,
    func,
    Enum as SQLEnum,
    UniqueConstraint,
)

from core.utils.datetime import now
from database.engine import Base

if TYPE_CHECKING:
    from database.models.users import User, Portfolio


class ContributorStatus(str, PyEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class PortfolioContributor(Base):
    """A user invited to be credited on someone else's portfolio item."""

    __tablename__: str = "portfolio_contributors"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[ContributorStatus] = mapped_column(
        SQLEnum(ContributorStatus, native_enum=False, length=50),
        nullable=False,
        default=ContributorStatus.PENDING,
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

    portfolio: Mapped["Portfolio"] = relationship("Portfolio")
    user: Mapped["User"] = relationship("User")

    __table_args__ = (
        UniqueConstraint("portfolio_id", "user_id", name="uq_portfolio_contributors_portfolio_user"),
    )
