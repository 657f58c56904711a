"""
User profile endpoints.

Provides search, public profiles, and management of the signed-in user's
skills, portfolio and work experience.
"""

import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_user_service, require_authenticated_user
from api.schemas.common import MessageResponse
from api.schemas.users import (
    UserResponse,
    UserSearchResponse,
    ProfileUpdate,
    ProfileResponse,
    SkillCreate,
    SkillResponse,
    PortfolioCreate,
    PortfolioUpdate,
    PortfolioResponse,
    WorkExperienceCreate,
    WorkExperienceUpdate,
    WorkExperienceResponse,
)
from api.services import UserService
from database.models import User, UserRole

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/search",
    response_model=UserSearchResponse,
    summary="Search Users",
    description="Search active users by name, username, job title or bio.",
)
async def search_users(
    q: Optional[str] = Query(None, description="Free text search"),
    role: Optional[UserRole] = Query(None, description="FREELANCER, AGENCY or STARTUP"),
    location: Optional[str] = Query(None),
    available: Optional[bool] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_service: UserService = Depends(get_user_service),
):
    result = await user_service.search_users(q, role, location, available, limit, offset)
    return UserSearchResponse.model_validate(result)


@router.put("/me", response_model=UserResponse, summary="Update Profile")
async def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    """Update the signed-in user's profile. Only provided fields change."""
    user = await user_service.update_profile(current_user.id, update.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


# ==================== Skills ==================== #

@router.post(
    "/me/skills",
    response_model=SkillResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Skill",
)
async def add_skill(
    skill: SkillCreate,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    user_skill = await user_service.add_skill(current_user.id, skill.name)
    return SkillResponse.model_validate(user_skill.skill)


@router.delete("/me/skills/{skill_id}", response_model=MessageResponse, summary="Remove Skill")
async def remove_skill(
    skill_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.remove_skill(current_user.id, skill_id)
    return MessageResponse(message="Skill removed")


# ==================== Portfolio ==================== #

@router.post(
    "/me/portfolio",
    response_model=PortfolioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Portfolio Item",
)
async def add_portfolio(
    portfolio: PortfolioCreate,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    created = await user_service.add_portfolio(current_user.id, portfolio.model_dump())
    return PortfolioResponse.model_validate(created)


@router.put("/me/portfolio/{portfolio_id}", response_model=PortfolioResponse, summary="Update Portfolio Item")
async def update_portfolio(
    portfolio_id: uuid.UUID,
    update: PortfolioUpdate,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    portfolio = await user_service.update_portfolio(
        current_user.id, portfolio_id, update.model_dump(exclude_unset=True)
    )
    return PortfolioResponse.model_validate(portfolio)


@router.delete("/me/portfolio/{portfolio_id}", response_model=MessageResponse, summary="Delete Portfolio Item")
async def delete_portfolio(
    portfolio_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.delete_portfolio(current_user.id, portfolio_id)
    return MessageResponse(message="Portfolio item deleted")


# ==================== Work experience ==================== #

@router.post(
    "/me/experience",
    response_model=WorkExperienceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Work Experience",
)
async def add_work_experience(
    experience: WorkExperienceCreate,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    created = await user_service.add_work_experience(current_user.id, experience.model_dump())
    return WorkExperienceResponse.model_validate(created)


@router.put(
    "/me/experience/{experience_id}",
    response_model=WorkExperienceResponse,
    summary="Update Work Experience",
)
async def update_work_experience(
    experience_id: uuid.UUID,
    update: WorkExperienceUpdate,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    experience = await user_service.update_work_experience(
        current_user.id, experience_id, update.model_dump(exclude_unset=True)
    )
    return WorkExperienceResponse.model_validate(experience)


@router.delete("/me/experience/{experience_id}", response_model=MessageResponse, summary="Delete Work Experience")
async def delete_work_experience(
    experience_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.delete_work_experience(current_user.id, experience_id)
    return MessageResponse(message="Work experience deleted")


# ==================== Public profiles ==================== #

@router.get(
    "/{user_id}",
    response_model=ProfileResponse,
    summary="Get Profile",
    description="Public profile with skills, recent portfolio items and work experience.",
)
async def get_profile(
    user_id: uuid.UUID,
    user_service: UserService = Depends(get_user_service),
):
    profile = await user_service.get_user_profile(user_id)
    return ProfileResponse.model_validate(profile)


@router.get("/{user_id}/portfolio", response_model=list[PortfolioResponse], summary="List Portfolio")
async def list_portfolio(
    user_id: uuid.UUID,
    user_service: UserService = Depends(get_user_service),
):
    portfolios = await user_service.get_user_portfolio(user_id)
    return [PortfolioResponse.model_validate(p) for p in portfolios]


@router.get("/{user_id}/experience", response_model=list[WorkExperienceResponse], summary="List Work Experience")
async def list_work_experience(
    user_id: uuid.UUID,
    user_service: UserService = Depends(get_user_service),
):
    experiences = await user_service.get_user_work_experiences(user_id)
    return [WorkExperienceResponse.model_validate(e) for e in experiences]
