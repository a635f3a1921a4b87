"""
User Endpoints

POST /users/setIsActive toggles a user's availability for review;
GET /users/getReview lists the pull requests a user reviews.
"""

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_assignment_service
from app.models import ErrorResponse, SetIsActiveRequest, UserResponse, UserReviewsResponse
from app.services.assignment import AssignmentService

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/setIsActive",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_is_active(
    request: SetIsActiveRequest,
    service: AssignmentService = Depends(get_assignment_service),
) -> UserResponse:
    user = await service.set_user_active_status(request.user_id, request.is_active)
    return UserResponse(user=user)


@router.get(
    "/getReview",
    response_model=UserReviewsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_review(
    user_id: str = Query(min_length=1),
    service: AssignmentService = Depends(get_assignment_service),
) -> UserReviewsResponse:
    prs = await service.get_user_review_prs(user_id)
    return UserReviewsResponse(user_id=user_id, pull_requests=prs)
