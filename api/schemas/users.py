"""User, profile and auth Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from database.models import UserRole


class UserSummary(BaseModel):
    """Minimal user card embedded in other resources."""

    id: uuid.UUID
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    job_title: Optional[str] = None

    class Config:
        from_attributes = True


class UserPublic(UserSummary):
    """Public profile fields."""

    role: UserRole
    bio: Optional[str] = None
    location: Optional[str] = None
    country: Optional[str] = None
    available: bool = True
    next_availability: Optional[datetime] = None
    hourly_rate: Optional[float] = None
    created_at: datetime


class UserResponse(UserPublic):
    """The signed-in user's own account."""

    email: str
    updated_at: datetime


class UserSearchItem(UserPublic):
    skills: list[str] = Field(default_factory=list, description="Skill names")

    @field_validator("skills", mode="before")
    @classmethod
    def skill_names(cls, v: Any) -> Any:
        """Accept UserSkill rows as well as plain names."""
        return [getattr(getattr(s, "skill", None), "name", s) for s in v or []]


class UserSearchResponse(BaseModel):
    users: list[UserSearchItem]
    total: int


# ==================== Auth ==================== #

class RegisterRequest(BaseModel):
    """Registration payload."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=128, description="At least 8 characters")
    name: str = Field(min_length=1, max_length=200, description="Full name")
    username: str = Field(min_length=3, max_length=20)
    role: UserRole = UserRole.FREELANCER

    @field_validator("name", "username", mode="before")
    @classmethod
    def strip_fields(cls, v: Any) -> Any:
        """Strip whitespace from text fields."""
        if isinstance(v, str):
            return v.strip()
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


# ==================== Profile ==================== #

class ProfileUpdate(BaseModel):
    """Profile fields a user may change. Omitted fields stay as they are."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(None, description="3-20 letters, digits, _ or -")
    bio: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    job_title: Optional[str] = Field(None, max_length=255)
    available: Optional[bool] = None
    next_availability: Optional[datetime] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    avatar: Optional[str] = Field(None, max_length=500)


class SkillCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class SkillResponse(BaseModel):
    id: uuid.UUID
    name: str

    class Config:
        from_attributes = True


class PortfolioCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    company_name: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, max_length=255)
    work_urls: Optional[str] = None
    media_file: Optional[str] = Field(None, max_length=500)


class PortfolioUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    company_name: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, max_length=255)
    work_urls: Optional[str] = None
    media_file: Optional[str] = Field(None, max_length=500)


class PortfolioResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: Optional[str] = None
    company_name: Optional[str] = None
    role: Optional[str] = None
    work_urls: Optional[str] = None
    media_file: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WorkExperienceCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    company: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    present: bool = False


class WorkExperienceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    company: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    present: Optional[bool] = None


class WorkExperienceResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    company: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    present: bool

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    """Public profile page."""

    user: UserPublic
    skills: list[SkillResponse]
    portfolios: list[PortfolioResponse]
    work_experiences: list[WorkExperienceResponse]
