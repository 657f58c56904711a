"""
User service functions for API endpoints.

Profiles, skills, portfolio items and work experience.
"""

from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy import select, func, or_
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from core.exceptions import ValidationError, NotFoundError, ConflictError
from core.utils.validators import validate_username
from database.models import User, UserRole, Skill, UserSkill, Portfolio, WorkExperience

logger = logging.getLogger(__name__)

PROFILE_PORTFOLIO_LIMIT = 6
PROFILE_EXPERIENCE_LIMIT = 5

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "username",
    "bio",
    "location",
    "country",
    "job_title",
    "available",
    "next_availability",
    "hourly_rate",
    "avatar",
)
PORTFOLIO_FIELDS = ("name", "description", "company_name", "role", "work_urls", "media_file")
EXPERIENCE_FIELDS = ("title", "company", "description", "start_date", "end_date", "present")


class UserService(BaseService):

    # ==================== Profiles ==================== #

    async def search_users(
        self,
        q: Optional[str] = None,
        role: Optional[UserRole] = None,
        location: Optional[str] = None,
        available: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """
        Search active users by name, username, job title or bio.

        Returns:
            Dict with users and total
        """
        filters = [User.is_active.is_(True)]
        if q:
            pattern = f"%{q}%"
            filters.append(or_(
                User.username.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.job_title.ilike(pattern),
                User.bio.ilike(pattern),
            ))
        if role is not None:
            filters.append(User.role == role)
        if location:
            filters.append(User.location.ilike(f"%{location}%"))
        if available is not None:
            filters.append(User.available.is_(available))

        total = (await self.db.execute(
            select(func.count()).select_from(User).where(*filters)
        )).scalar_one()
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.skills).selectinload(UserSkill.skill))
            .where(*filters)
            .order_by(User.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return {"users": list(result.scalars().all()), "total": total}

    async def get_user_profile(self, user_id: uuid.UUID) -> Dict[str, Any]:
        """Public profile: user, skills, latest portfolio items and experience."""
        user = await self._get_or_404(
            User,
            user_id,
            "User not found",
            (selectinload(User.skills).selectinload(UserSkill.skill),),
        )
        portfolios = (await self.db.execute(
            select(Portfolio)
            .where(Portfolio.user_id == user_id)
            .order_by(Portfolio.created_at.desc())
            .limit(PROFILE_PORTFOLIO_LIMIT)
        )).scalars().all()
        experiences = (await self.db.execute(
            select(WorkExperience)
            .where(WorkExperience.user_id == user_id)
            .order_by(WorkExperience.start_date.desc())
            .limit(PROFILE_EXPERIENCE_LIMIT)
        )).scalars().all()

        return {
            "user": user,
            "skills": [s.skill for s in user.skills],
            "portfolios": list(portfolios),
            "work_experiences": list(experiences),
        }

    async def update_profile(self, user_id: uuid.UUID, data: Dict[str, Any]) -> User:
        user = await self._get_or_404(User, user_id, "User not found")

        username = data.get("username")
        if username and username != user.username:
            ok, error = validate_username(username)
            if not ok:
                raise ValidationError(error)
            taken = (await self.db.execute(
                select(User.id).where(User.username == username, User.id != user_id)
            )).first()
            if taken:
                raise ConflictError("Username already taken")

        for field in PROFILE_FIELDS:
            if field in data and not (field == "username" and not data[field]):
                setattr(user, field, data[field])

        await self.db.commit()
        logger.info(f"Profile updated: {user_id}")
        return await self._get_or_404(
            User, user_id, "User not found",
            (selectinload(User.skills).selectinload(UserSkill.skill),),
        )

    # ==================== Skills ==================== #

    async def add_skill(self, user_id: uuid.UUID, name: str) -> UserSkill:
        """Attach a skill, creating the lower-cased skill name on first use."""
        name = name.strip().lower()
        if not name:
            raise ValidationError("Skill name is required")

        skill = (await self.db.execute(
            select(Skill).where(Skill.name == name)
        )).scalar_one_or_none()
        if skill is None:
            skill = Skill(name=name)
            self.db.add(skill)
            await self.db.flush()
        else:
            held = (await self.db.execute(
                select(UserSkill.id).where(UserSkill.user_id == user_id, UserSkill.skill_id == skill.id)
            )).first()
            if held:
                raise ConflictError("Skill already added")

        user_skill = UserSkill(user_id=user_id, skill_id=skill.id)
        self.db.add(user_skill)
        await self.db.commit()

        logger.info(f"Skill {name} added for user {user_id}")
        return await self._get_or_404(
            UserSkill, user_skill.id, "Skill not found", (selectinload(UserSkill.skill),)
        )

    async def remove_skill(self, user_id: uuid.UUID, skill_id: uuid.UUID) -> None:
        user_skill = (await self.db.execute(
            select(UserSkill).where(UserSkill.user_id == user_id, UserSkill.skill_id == skill_id)
        )).scalar_one_or_none()
        if user_skill is None:
            raise NotFoundError("Skill not found")

        await self.db.delete(user_skill)
        await self.db.commit()
        logger.info(f"Skill {skill_id} removed for user {user_id}")

    # ==================== Portfolio ==================== #

    async def _owned_portfolio(self, user_id: uuid.UUID, portfolio_id: uuid.UUID) -> Portfolio:
        portfolio = await self._get(Portfolio, portfolio_id)
        if portfolio is None or portfolio.user_id != user_id:
            raise NotFoundError("Portfolio not found")
        return portfolio

    async def add_portfolio(self, user_id: uuid.UUID, data: Dict[str, Any]) -> Portfolio:
        portfolio = Portfolio(user_id=user_id, **{f: data.get(f) for f in PORTFOLIO_FIELDS})
        self.db.add(portfolio)
        await self.db.commit()
        logger.info(f"Portfolio created: {portfolio.id}")
        return await self._owned_portfolio(user_id, portfolio.id)

    async def update_portfolio(
        self, user_id: uuid.UUID, portfolio_id: uuid.UUID, data: Dict[str, Any]
    ) -> Portfolio:
        portfolio = await self._owned_portfolio(user_id, portfolio_id)
        for field in PORTFOLIO_FIELDS:
            if field in data:
                setattr(portfolio, field, data[field])
        await self.db.commit()
        logger.info(f"Portfolio updated: {portfolio_id}")
        return await self._owned_portfolio(user_id, portfolio_id)

    async def delete_portfolio(self, user_id: uuid.UUID, portfolio_id: uuid.UUID) -> None:
        portfolio = await self._owned_portfolio(user_id, portfolio_id)
        await self.db.delete(portfolio)
        await self.db.commit()
        logger.info(f"Portfolio deleted: {portfolio_id}")

    async def get_user_portfolio(self, user_id: uuid.UUID) -> List[Portfolio]:
        await self._get_or_404(User, user_id, "User not found")
        result = await self.db.execute(
            select(Portfolio).where(Portfolio.user_id == user_id).order_by(Portfolio.created_at.desc())
        )
        return list(result.scalars().all())

    # ==================== Work experience ==================== #

    async def _owned_experience(self, user_id: uuid.UUID, experience_id: uuid.UUID) -> WorkExperience:
        experience = await self._get(WorkExperience, experience_id)
        if experience is None or experience.user_id != user_id:
            raise NotFoundError("Work experience not found")
        return experience

    async def add_work_experience(self, user_id: uuid.UUID, data: Dict[str, Any]) -> WorkExperience:
        experience = WorkExperience(
            user_id=user_id,
            **{f: data[f] for f in EXPERIENCE_FIELDS if data.get(f) is not None},
        )
        if experience.present:
            experience.end_date = None
        self.db.add(experience)
        await self.db.commit()
        logger.info(f"Work experience created: {experience.id}")
        return await self._owned_experience(user_id, experience.id)

    async def update_work_experience(
        self, user_id: uuid.UUID, experience_id: uuid.UUID, data: Dict[str, Any]
    ) -> WorkExperience:
        experience = await self._owned_experience(user_id, experience_id)
        for field in EXPERIENCE_FIELDS:
            if field in data:
                setattr(experience, field, data[field])
        if experience.present:
            experience.end_date = None
        await self.db.commit()
        logger.info(f"Work experience updated: {experience_id}")
        return await self._owned_experience(user_id, experience_id)

    async def delete_work_experience(self, user_id: uuid.UUID, experience_id: uuid.UUID) -> None:
        experience = await self._owned_experience(user_id, experience_id)
        await self.db.delete(experience)
        await self.db.commit()
        logger.info(f"Work experience deleted: {experience_id}")

    async def get_user_work_experiences(self, user_id: uuid.UUID) -> List[WorkExperience]:
        await self._get_or_404(User, user_id, "User not found")
        result = await self.db.execute(
            select(WorkExperience)
            .where(WorkExperience.user_id == user_id)
            .order_by(WorkExperience.start_date.desc())
        )
        return list(result.scalars().all())
