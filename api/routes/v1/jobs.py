"""
Job posting endpoints.

Provides the public job board, team job management and applying to jobs.
"""

import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import (
    get_job_service,
    get_application_service,
    require_authenticated_user,
)
from api.schemas.common import MessageResponse
from api.schemas.jobs import (
    JobCreate,
    JobUpdate,
    JobResponse,
    JobListResponse,
    JobCountResponse,
    HasAppliedResponse,
    ApplicationCreate,
    ApplicationResponse,
)
from api.services import JobService, ApplicationService
from database.models import User, JobType, JobStatus, ApplicationStatus

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "",
    response_model=JobListResponse,
    summary="List Jobs",
    description="Active job postings, featured and sponsored first.",
)
async def list_jobs(
    team_id: Optional[uuid.UUID] = Query(None),
    sub_team_id: Optional[uuid.UUID] = Query(None),
    type: Optional[JobType] = Query(None, description="Filter by job type"),
    location: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search title and description"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    job_service: JobService = Depends(get_job_service),
):
    result = await job_service.get_active_jobs(team_id, sub_team_id, type, location, search, page, limit)
    return JobListResponse.model_validate(result)


# ==================== Team jobs ==================== #

@router.post(
    "/teams/{team_id}",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Job",
    description=(
        "Post a job for a main team or a sub-team. Requires owner or admin of the "
        "team, or of the parent team for a sub-team."
    ),
)
async def create_job(
    team_id: uuid.UUID,
    job: JobCreate,
    current_user: User = Depends(require_authenticated_user),
    job_service: JobService = Depends(get_job_service),
):
    created = await job_service.create_job(team_id, current_user.id, job.model_dump())
    return JobResponse.model_validate(created)


@router.get("/teams/{team_id}", response_model=list[JobResponse], summary="Team Jobs")
async def list_team_jobs(
    team_id: uuid.UUID,
    status: Optional[JobStatus] = Query(None),
    job_service: JobService = Depends(get_job_service),
):
    jobs = await job_service.get_team_jobs(team_id, status)
    return [JobResponse.model_validate(j) for j in jobs]


@router.get("/teams/{team_id}/count", response_model=JobCountResponse, summary="Active Job Count")
async def count_team_jobs(
    team_id: uuid.UUID,
    include_sub_teams: bool = Query(False),
    job_service: JobService = Depends(get_job_service),
):
    count = await job_service.get_active_jobs_count(team_id, include_sub_teams)
    return JobCountResponse(count=count)


@router.get("/teams/{team_id}/sub-teams/counts", response_model=dict[str, int], summary="Sub-team Job Counts")
async def count_sub_team_jobs(
    team_id: uuid.UUID,
    job_service: JobService = Depends(get_job_service),
):
    """Active job count keyed by sub-team id."""
    return await job_service.get_sub_team_job_counts(team_id)


# ==================== Jobs ==================== #

@router.get("/{job_id}", response_model=JobResponse, summary="Get Job")
async def get_job(
    job_id: uuid.UUID,
    job_service: JobService = Depends(get_job_service),
):
    job = await job_service.get_job(job_id)
    return JobResponse.model_validate(job)


@router.patch("/{job_id}", response_model=JobResponse, summary="Update Job")
async def update_job(
    job_id: uuid.UUID,
    update: JobUpdate,
    current_user: User = Depends(require_authenticated_user),
    job_service: JobService = Depends(get_job_service),
):
    job = await job_service.update_job(job_id, current_user.id, update.model_dump(exclude_unset=True))
    return JobResponse.model_validate(job)


@router.delete("/{job_id}", response_model=MessageResponse, summary="Delete Job")
async def delete_job(
    job_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    job_service: JobService = Depends(get_job_service),
):
    await job_service.delete_job(job_id, current_user.id)
    return MessageResponse(message="Job posting deleted successfully")


# ==================== Applying ==================== #

@router.post(
    "/{job_id}/apply",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to Job",
)
async def apply_to_job(
    job_id: uuid.UUID,
    application: ApplicationCreate,
    current_user: User = Depends(require_authenticated_user),
    application_service: ApplicationService = Depends(get_application_service),
):
    """Apply to an active job. One application per user and job."""
    created = await application_service.apply_to_job(
        job_id, current_user.id, application.cover_letter, application.resume_url
    )
    return ApplicationResponse.model_validate(created)


@router.get("/{job_id}/has-applied", response_model=HasAppliedResponse, summary="Has Applied")
async def has_applied(
    job_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    application_service: ApplicationService = Depends(get_application_service),
):
    applied = await application_service.has_user_applied(job_id, current_user.id)
    return HasAppliedResponse(has_applied=applied)


@router.get("/{job_id}/applications", response_model=list[ApplicationResponse], summary="Job Applications")
async def list_job_applications(
    job_id: uuid.UUID,
    status: Optional[ApplicationStatus] = Query(None),
    current_user: User = Depends(require_authenticated_user),
    application_service: ApplicationService = Depends(get_application_service),
):
    """Applications to a job. Requires owner or admin of the posting team."""
    applications = await application_service.get_job_applications(job_id, current_user.id, status)
    return [ApplicationResponse.model_validate(a) for a in applications]


@router.get("/{job_id}/applications/count", response_model=JobCountResponse, summary="Application Count")
async def count_job_applications(
    job_id: uuid.UUID,
    application_service: ApplicationService = Depends(get_application_service),
):
    count = await application_service.get_job_application_count(job_id)
    return JobCountResponse(count=count)
