"""Shared plumbing for the service classes."""

import uuid
from typing import Any, Optional, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundError
from core.middleware.authorization import MembershipAuthorizer

ModelT = TypeVar("ModelT")


class BaseService:
    """
    Services receive the request's session instead of opening their own, so a
    service call and the work it triggers share one unit of work.

    Args:
        db: Database session
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.authorizer = MembershipAuthorizer(db)

    async def _get(
        self,
        model: type[ModelT],
        object_id: uuid.UUID,
        options: Sequence[Any] = (),
    ) -> Optional[ModelT]:
        """Load one row by id, refreshing any copy already in the session."""
        result = await self.db.execute(
            select(model)
            .options(*options)
            .where(model.id == object_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _get_or_404(
        self,
        model: type[ModelT],
        object_id: uuid.UUID,
        message: str,
        options: Sequence[Any] = (),
    ) -> ModelT:
        obj = await self._get(model, object_id, options)
        if obj is None:
            raise NotFoundError(message)
        return obj
