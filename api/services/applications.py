"""
Application service functions for API endpoints.

Applicants apply to active job postings; owners and admins of the posting
team review them.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from api.services.jobs import JobService
from core.exceptions import ValidationError, PermissionDenied, NotFoundError, ConflictError
from database.models import JobApplication, ApplicationStatus, JobPosting, JobStatus

logger = logging.getLogger(__name__)

_APPLICATION_OPTIONS = (
    selectinload(JobApplication.user),
    selectinload(JobApplication.job).selectinload(JobPosting.team),
)


class ApplicationService(JobService):
    """Job applications; shares the posting-manager check with ``JobService``."""

    async def _load_application(self, application_id: uuid.UUID) -> JobApplication:
        return await self._get_or_404(
            JobApplication, application_id, "Application not found", _APPLICATION_OPTIONS
        )

    async def apply_to_job(
        self,
        job_id: uuid.UUID,
        user_id: uuid.UUID,
        cover_letter: Optional[str] = None,
        resume_url: Optional[str] = None,
    ) -> JobApplication:
        """
        Apply to an active job posting.

        Raises:
            NotFoundError: Posting does not exist
            ValidationError: Posting not active, or the caller created it
            ConflictError: Caller already applied
        """
        job = await self._get_or_404(JobPosting, job_id, "Job posting not found")
        if job.status != JobStatus.ACTIVE:
            raise ValidationError("This job posting is not accepting applications")
        if job.created_by_id == user_id:
            raise ValidationError("You cannot apply to your own job posting")
        if await self.has_user_applied(job_id, user_id):
            raise ConflictError("You have already applied to this job")

        application = JobApplication(
            job_id=job_id,
            user_id=user_id,
            cover_letter=cover_letter,
            resume_url=resume_url,
            status=ApplicationStatus.PENDING,
        )
        self.db.add(application)
        await self.db.commit()

        logger.info(f"Application submitted: {application.id} (job={job_id}, user={user_id})")
        return await self._load_application(application.id)

    async def has_user_applied(self, job_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(JobApplication.id).where(
                JobApplication.job_id == job_id,
                JobApplication.user_id == user_id,
            )
        )
        return result.first() is not None

    async def get_application(self, application_id: uuid.UUID, user_id: uuid.UUID) -> JobApplication:
        """Visible to the applicant and to managers of the posting team."""
        application = await self._load_application(application_id)
        if application.user_id != user_id and not await self.can_manage_jobs(user_id, application.job):
            raise PermissionDenied("You do not have access to this application")
        return application

    async def get_job_applications(
        self,
        job_id: uuid.UUID,
        user_id: uuid.UUID,
        status: Optional[ApplicationStatus] = None,
    ) -> List[JobApplication]:
        job = await self._get_or_404(JobPosting, job_id, "Job posting not found")
        if not await self.can_manage_jobs(user_id, job):
            raise PermissionDenied("Only team owners and admins can view applications")

        query = select(JobApplication).options(*_APPLICATION_OPTIONS).where(
            JobApplication.job_id == job_id
        )
        if status is not None:
            query = query.where(JobApplication.status == status)
        result = await self.db.execute(query.order_by(JobApplication.created_at.desc()))
        return list(result.scalars().all())

    async def get_user_applications(self, user_id: uuid.UUID) -> List[JobApplication]:
        result = await self.db.execute(
            select(JobApplication)
            .options(*_APPLICATION_OPTIONS)
            .where(JobApplication.user_id == user_id)
            .order_by(JobApplication.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_job_application_count(self, job_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count(JobApplication.id)).where(JobApplication.job_id == job_id)
        )
        return result.scalar_one()

    async def update_application_status(
        self,
        application_id: uuid.UUID,
        user_id: uuid.UUID,
        status: ApplicationStatus,
    ) -> JobApplication:
        application = await self._load_application(application_id)
        if not await self.can_manage_jobs(user_id, application.job):
            raise PermissionDenied("Only team owners and admins can update application status")

        application.status = status
        await self.db.commit()

        logger.info(f"Application {application_id} status set to {status.value}")
        return await self._load_application(application_id)

    async def withdraw_application(self, application_id: uuid.UUID, user_id: uuid.UUID) -> Dict[str, Any]:
        """
        Withdraw (delete) an application. ACCEPTED applications stay.

        Returns:
            Dict with a confirmation message
        """
        application = await self._get(JobApplication, application_id)
        if application is None:
            raise NotFoundError("Application not found")
        if application.user_id != user_id:
            raise PermissionDenied("You can only withdraw your own applications")
        if application.status == ApplicationStatus.ACCEPTED:
            raise ValidationError("Cannot withdraw an accepted application")

        await self.db.delete(application)
        await self.db.commit()

        logger.info(f"Application withdrawn: {application_id}")
        return {"message": "Application withdrawn successfully"}
