"""Job and application Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from api.schemas.common import PaginationMeta, TimestampMixin
from api.schemas.teams import TeamSummary
from api.schemas.users import UserSummary
from database.models import JobType, JobStatus, ApplicationStatus


class JobCreate(BaseModel):
    """Schema for creating a job posting."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    type: JobType
    location: Optional[str] = Field(None, max_length=255)
    is_remote: bool = False
    requirements: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=10)
    status: JobStatus = JobStatus.ACTIVE
    sub_team_id: Optional[uuid.UUID] = Field(None, description="Sub-team the job is posted for")


class JobUpdate(BaseModel):
    """Schema for updating a job posting."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    type: Optional[JobType] = None
    location: Optional[str] = Field(None, max_length=255)
    is_remote: Optional[bool] = None
    requirements: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    status: Optional[JobStatus] = None


class JobBrief(BaseModel):
    id: uuid.UUID
    title: str
    type: JobType
    status: JobStatus
    location: Optional[str] = None
    is_remote: bool
    team_id: uuid.UUID
    sub_team_id: Optional[uuid.UUID] = None
    team: TeamSummary

    class Config:
        from_attributes = True


class JobResponse(JobBrief, TimestampMixin):
    """Full job posting."""

    description: str
    requirements: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str
    is_featured: bool
    is_sponsored: bool
    created_by_id: uuid.UUID
    sub_team: Optional[TeamSummary] = None


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
    pagination: PaginationMeta


class JobCountResponse(BaseModel):
    count: int


class HasAppliedResponse(BaseModel):
    has_applied: bool


class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = Field(None, max_length=10000)
    resume_url: Optional[str] = Field(None, max_length=500)


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationResponse(TimestampMixin):
    id: uuid.UUID
    job_id: uuid.UUID
    user_id: uuid.UUID
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    status: ApplicationStatus
    user: UserSummary
    job: JobBrief

    class Config:
        from_attributes = True
