"""Job service functions."""

import logging
import math
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.orm import selectinload

from api.services.base import BaseService
from core.exceptions import ValidationError, PermissionDenied
from database.models import JobPosting, JobStatus, JobType, Team

logger = logging.getLogger(__name__)

_JOB_OPTIONS = (
    selectinload(JobPosting.team),
    selectinload(JobPosting.sub_team),
)

_JOB_FIELDS = (
    "title",
    "description",
    "type",
    "location",
    "is_remote",
    "requirements",
    "salary_min",
    "salary_max",
    "currency",
    "status",
    "is_featured",
    "is_sponsored",
)


def _check_salary_range(salary_min: Optional[float], salary_max: Optional[float]) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValidationError("salary_min cannot be greater than salary_max")


class JobService(BaseService):
    """Job postings of teams and their sub-teams."""

    async def _load(self, job_id: uuid.UUID) -> JobPosting:
        return await self._get_or_404(JobPosting, job_id, "Job posting not found", _JOB_OPTIONS)

    async def can_manage_jobs(self, user_id: uuid.UUID, job: JobPosting) -> bool:
        """Owners/admins of the posting team, or of the sub-team it was posted for."""
        if await self.authorizer.can_manage(user_id, job.team_id):
            return True
        if job.sub_team_id is not None:
            return await self.authorizer.can_manage(user_id, job.sub_team_id)
        return False

    async def create_job(self, team_id: uuid.UUID, user_id: uuid.UUID, data: Dict[str, Any]) -> JobPosting:
        """
        Create a job posting.

        Posting on a sub-team stores it under the parent team with
        ``sub_team_id`` set, so main-team listings include it.

        Args:
            team_id: Team (or sub-team) posting the job
            user_id: Creating owner/admin
            data: Posting fields; may carry ``sub_team_id``

        Returns:
            The created posting
        """
        team = await self._get_or_404(Team, team_id, "Team not found")
        sub_team_id = data.get("sub_team_id")

        if team.is_main_team:
            await self.authorizer.require_manager(
                user_id, team_id, "Only team owners and admins can create job postings"
            )
            if sub_team_id is not None:
                sub_team = await self._get(Team, sub_team_id)
                if sub_team is None or sub_team.parent_team_id != team_id:
                    raise ValidationError("Sub-team does not belong to this team")
        else:
            if not (
                await self.authorizer.can_manage(user_id, team.id)
                or await self.authorizer.can_manage(user_id, team.parent_team_id)
            ):
                raise PermissionDenied("Only team owners and admins can create job postings")
            sub_team_id = team.id
            team_id = team.parent_team_id

        _check_salary_range(data.get("salary_min"), data.get("salary_max"))

        job = JobPosting(
            team_id=team_id,
            sub_team_id=sub_team_id,
            created_by_id=user_id,
            **{field: data[field] for field in _JOB_FIELDS if data.get(field) is not None},
        )
        self.db.add(job)
        await self.db.commit()

        logger.info(f"Job posting created: {job.id} (team={team_id}, sub_team={sub_team_id})")
        return await self._load(job.id)

    async def get_job(self, job_id: uuid.UUID) -> JobPosting:
        return await self._load(job_id)

    async def update_job(self, job_id: uuid.UUID, user_id: uuid.UUID, data: Dict[str, Any]) -> JobPosting:
        job = await self._load(job_id)
        if not await self.can_manage_jobs(user_id, job):
            raise PermissionDenied("Only team owners and admins can update job postings")

        _check_salary_range(
            data.get("salary_min", job.salary_min),
            data.get("salary_max", job.salary_max),
        )
        for field in _JOB_FIELDS:
            if field in data:
                setattr(job, field, data[field])

        await self.db.commit()
        logger.info(f"Job posting updated: {job_id}")
        return await self._load(job_id)

    async def delete_job(self, job_id: uuid.UUID, user_id: uuid.UUID) -> None:
        job = await self._load(job_id)
        if not await self.can_manage_jobs(user_id, job):
            raise PermissionDenied("Only team owners and admins can delete job postings")

        await self.db.delete(job)
        await self.db.commit()
        logger.info(f"Job posting deleted: {job_id}")

    async def get_team_jobs(self, team_id: uuid.UUID, status: Optional[JobStatus] = None) -> List[JobPosting]:
        """Jobs of a main team (including its sub-teams' jobs) or of one sub-team."""
        team = await self._get_or_404(Team, team_id, "Team not found")

        query = select(JobPosting).options(*_JOB_OPTIONS)
        if team.is_main_team:
            query = query.where(JobPosting.team_id == team_id)
        else:
            query = query.where(JobPosting.sub_team_id == team_id)
        if status is not None:
            query = query.where(JobPosting.status == status)

        result = await self.db.execute(query.order_by(JobPosting.created_at.desc()))
        return list(result.scalars().all())

    async def get_active_jobs_count(self, team_id: uuid.UUID, include_sub_teams: bool = False) -> int:
        team = await self._get_or_404(Team, team_id, "Team not found")

        query = select(func.count(JobPosting.id)).where(JobPosting.status == JobStatus.ACTIVE)
        if not team.is_main_team:
            query = query.where(JobPosting.sub_team_id == team_id)
        elif include_sub_teams:
            query = query.where(JobPosting.team_id == team_id)
        else:
            query = query.where(JobPosting.team_id == team_id, JobPosting.sub_team_id.is_(None))

        return (await self.db.execute(query)).scalar_one()

    async def get_sub_team_job_counts(self, team_id: uuid.UUID) -> Dict[str, int]:
        """
        Active job count per sub-team of a main team.

        Returns:
            Mapping of sub-team id to count, zero for sub-teams without jobs
        """
        team = await self._get_or_404(Team, team_id, "Team not found")
        if not team.is_main_team:
            raise ValidationError("Sub-team job counts are only available for main teams")

        sub_team_ids = (await self.db.execute(
            select(Team.id).where(Team.parent_team_id == team_id)
        )).scalars().all()
        counts = {str(sub_id): 0 for sub_id in sub_team_ids}
        if not sub_team_ids:
            return counts

        rows = await self.db.execute(
            select(JobPosting.sub_team_id, func.count(JobPosting.id))
            .where(
                JobPosting.sub_team_id.in_(sub_team_ids),
                JobPosting.status == JobStatus.ACTIVE,
            )
            .group_by(JobPosting.sub_team_id)
        )
        for sub_id, count in rows.all():
            counts[str(sub_id)] = count
        return counts

    async def get_active_jobs(
        self,
        team_id: Optional[uuid.UUID] = None,
        sub_team_id: Optional[uuid.UUID] = None,
        job_type: Optional[JobType] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Public job board: active postings, featured and sponsored first, then newest."""
        filters = [JobPosting.status == JobStatus.ACTIVE]
        if team_id is not None:
            filters.append(JobPosting.team_id == team_id)
        if sub_team_id is not None:
            filters.append(JobPosting.sub_team_id == sub_team_id)
        if job_type is not None:
            filters.append(JobPosting.type == job_type)
        if location:
            filters.append(JobPosting.location.ilike(f"%{location}%"))
        if search:
            filters.append(or_(
                JobPosting.title.ilike(f"%{search}%"),
                JobPosting.description.ilike(f"%{search}%"),
            ))

        total = (await self.db.execute(
            select(func.count()).select_from(JobPosting).where(*filters)
        )).scalar_one()

        result = await self.db.execute(
            select(JobPosting)
            .options(*_JOB_OPTIONS)
            .where(*filters)
            .order_by(
                JobPosting.is_featured.desc(),
                JobPosting.is_sponsored.desc(),
                JobPosting.created_at.desc(),
            )
            .offset((page - 1) * limit)
            .limit(limit)
        )

        return {
            "jobs": list(result.scalars().all()),
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        }
