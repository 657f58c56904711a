"""
Job application endpoints.

Applicants see and withdraw their own applications; team owners and admins
review applications to their postings.
"""

import uuid
from fastapi import APIRouter, Depends

from api.dependencies import get_application_service, require_authenticated_user
from api.schemas.common import MessageResponse
from api.schemas.jobs import ApplicationResponse, ApplicationStatusUpdate
from api.services import ApplicationService
from database.models import User

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("/my", response_model=list[ApplicationResponse], summary="My Applications")
async def list_my_applications(
    current_user: User = Depends(require_authenticated_user),
    application_service: ApplicationService = Depends(get_application_service),
):
    applications = await application_service.get_user_applications(current_user.id)
    return [ApplicationResponse.model_validate(a) for a in applications]


@router.get("/{application_id}", response_model=ApplicationResponse, summary="Get Application")
async def get_application(
    application_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    application_service: ApplicationService = Depends(get_application_service),
):
    """Visible to the applicant and to managers of the posting team."""
    application = await application_service.get_application(application_id, current_user.id)
    return ApplicationResponse.model_validate(application)


@router.patch("/{application_id}/status", response_model=ApplicationResponse, summary="Update Application Status")
async def update_application_status(
    application_id: uuid.UUID,
    update: ApplicationStatusUpdate,
    current_user: User = Depends(require_authenticated_user),
    application_service: ApplicationService = Depends(get_application_service),
):
    application = await application_service.update_application_status(
        application_id, current_user.id, update.status
    )
    return ApplicationResponse.model_validate(application)


@router.delete("/{application_id}", response_model=MessageResponse, summary="Withdraw Application")
async def withdraw_application(
    application_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    application_service: ApplicationService = Depends(get_application_service),
):
    result = await application_service.withdraw_application(application_id, current_user.id)
    return MessageResponse.model_validate(result)
