"""Recommendation endpoints."""

import uuid
from fastapi import APIRouter, Depends, status

from api.dependencies import get_recommendation_service, require_authenticated_user
from api.schemas.common import MessageResponse
from api.schemas.portfolios import (
    RecommendationCreate,
    RecommendationStatusUpdate,
    RecommendationResponse,
)
from api.services import RecommendationService
from database.models import User

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.post(
    "",
    response_model=RecommendationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Recommendation",
    description=(
        "Recommend or rate another user. Project and team recommendations "
        "require that both users worked together."
    ),
)
async def create_recommendation(
    request: RecommendationCreate,
    current_user: User = Depends(require_authenticated_user),
    service: RecommendationService = Depends(get_recommendation_service),
):
    recommendation = await service.create_recommendation(
        sender_id=current_user.id,
        receiver_id=request.receiver_id,
        message=request.message,
        rec_type=request.type,
        rating=request.rating,
        portfolio_id=request.portfolio_id,
        project_id=request.project_id,
        team_id=request.team_id,
    )
    return RecommendationResponse.model_validate(recommendation)


@router.get(
    "/portfolio/{portfolio_id}",
    response_model=list[RecommendationResponse],
    summary="Portfolio Recommendations",
)
async def list_portfolio_recommendations(
    portfolio_id: uuid.UUID,
    service: RecommendationService = Depends(get_recommendation_service),
):
    recommendations = await service.get_portfolio_recommendations(portfolio_id)
    return [RecommendationResponse.model_validate(r) for r in recommendations]


@router.get("/user/{user_id}", response_model=list[RecommendationResponse], summary="User Recommendations")
async def list_user_recommendations(
    user_id: uuid.UUID,
    service: RecommendationService = Depends(get_recommendation_service),
):
    recommendations = await service.get_user_recommendations(user_id)
    return [RecommendationResponse.model_validate(r) for r in recommendations]


@router.patch(
    "/{recommendation_id}/status",
    response_model=RecommendationResponse,
    summary="Respond to Recommendation",
)
async def update_recommendation_status(
    recommendation_id: uuid.UUID,
    update: RecommendationStatusUpdate,
    current_user: User = Depends(require_authenticated_user),
    service: RecommendationService = Depends(get_recommendation_service),
):
    recommendation = await service.update_recommendation_status(
        recommendation_id, current_user.id, update.status
    )
    return RecommendationResponse.model_validate(recommendation)


@router.delete("/{recommendation_id}", response_model=MessageResponse, summary="Delete Recommendation")
async def delete_recommendation(
    recommendation_id: uuid.UUID,
    current_user: User = Depends(require_authenticated_user),
    service: RecommendationService = Depends(get_recommendation_service),
):
    await service.delete_recommendation(recommendation_id, current_user.id)
    return MessageResponse(message="Recommendation deleted")
