"""
Portfolio contributor endpoints.

Portfolio owners tag teammates as contributors; tagged users accept or
reject the credit.
"""

import uuid
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_portfolio_contributor_service, require_authenticated_user
from api.schemas.common import MessageResponse
from api.schemas.portfolios import (
    ContributorCreate,
    ContributorStatusUpdate,
    ContributorResponse,
    ContributorSuggestion,
)
from api.services import PortfolioContributorService
from database.models import User

router = APIRouter(prefix="/portfolios", tags=["portfolios"])


@router.get("/invitations", response_model=list[ContributorResponse], summary="Contributor Invitations")
async def list_contributor_invitations(
    current_user: User = Depends(require_authenticated_user),
    service: PortfolioContributorService = Depends(get_portfolio_contributor_service),
):
    """Pending contributor requests addressed to the signed-in user."""
    contributors = await service.get_user_contributor_invitations(current_user.id)
    return [ContributorResponse.model_validate(c) for c in contributors]


@router.get(
    "/{portfolio_id}/suggest-contributors",
    response_model=list[ContributorSuggestion],
    summary="Suggest Contributors",
    description="Teammates of the owner, most shared teams first. Owner only.",
)
async def suggest_contributors(
    portfolio_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: PortfolioContributorService = Depends(get_portfolio_contributor_service),
):
    suggestions = await service.suggest_contributors(portfolio_id, current_user.id)
    return [ContributorSuggestion.model_validate(s) for s in suggestions]


@router.post(
    "/{portfolio_id}/contributors",
    response_model=ContributorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Contributor",
)
async def add_contributor(
    portfolio_id: uuid.UUID,
    request: ContributorCreate,
    current_user: User = Depends(require_authenticated_user),
    service: PortfolioContributorService = Depends(get_portfolio_contributor_service),
):
    contributor = await service.add_contributor(portfolio_id, current_user.id, request.user_id, request.role)
    return ContributorResponse.model_validate(contributor)


@router.get("/{portfolio_id}/contributors", response_model=list[ContributorResponse], summary="List Contributors")
async def list_contributors(
    portfolio_id: uuid.UUID,
    include_all: bool = Query(False, description="Include pending and rejected contributors"),
    service: PortfolioContributorService = Depends(get_portfolio_contributor_service),
):
    contributors = await service.get_portfolio_contributors(portfolio_id, include_all)
    return [ContributorResponse.model_validate(c) for c in contributors]


@router.patch(
    "/{portfolio_id}/contributors/{contributor_id}",
    response_model=ContributorResponse,
    summary="Respond to Contributor Request",
)
async def update_contributor_status(
    portfolio_id: uuid.UUID,
    contributor_id: uuid.UUID,
    update: ContributorStatusUpdate,
    current_user: User = Depends(require_authenticated_user),
    service: PortfolioContributorService = Depends(get_portfolio_contributor_service),
):
    contributor = await service.update_contributor_status(
        portfolio_id, contributor_id, current_user.id, update.status
    )
    return ContributorResponse.model_validate(contributor)


@router.delete(
    "/{portfolio_id}/contributors/{contributor_id}",
    response_model=MessageResponse,
    summary="Remove Contributor",
)
async def remove_contributor(
    portfolio_id: uuid.UUID,
    contributor_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: PortfolioContributorService = Depends(get_portfolio_contributor_service),
):
    await service.remove_contributor(portfolio_id, contributor_id, current_user.id)
    return MessageResponse(message="Contributor removed")
