"""
Pull Request Endpoints

Creation assigns reviewers automatically, merge is idempotent, and
reassignment swaps one reviewer for another member of the same team.
"""

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_assignment_service
from app.models import (
    CreatePullRequestRequest,
    ErrorResponse,
    MergePullRequestRequest,
    PullRequestResponse,
    ReassignReviewerRequest,
    ReassignReviewerResponse,
)
from app.services.assignment import AssignmentService

router = APIRouter(prefix="/pullRequest", tags=["pull-requests"])


@router.post(
    "/create",
    response_model=PullRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_pull_request(
    request: CreatePullRequestRequest,
    service: AssignmentService = Depends(get_assignment_service),
) -> PullRequestResponse:
    """Create a pull request and assign up to two reviewers from the author's team."""
    pr = await service.create_pull_request(
        request.pull_request_id,
        request.pull_request_name,
        request.author_id
    )
    return PullRequestResponse(pr=pr)


@router.post(
    "/merge",
    response_model=PullRequestResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def merge_pull_request(
    request: MergePullRequestRequest,
    service: AssignmentService = Depends(get_assignment_service),
) -> PullRequestResponse:
    """Mark a pull request as MERGED. Repeating the call is harmless."""
    pr = await service.merge_pull_request(request.pull_request_id)
    return PullRequestResponse(pr=pr)


@router.post(
    "/reassign",
    response_model=ReassignReviewerResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def reassign_reviewer(
    request: ReassignReviewerRequest,
    service: AssignmentService = Depends(get_assignment_service),
) -> ReassignReviewerResponse:
    """Replace one assigned reviewer with another active member of their team."""
    pr, replaced_by = await service.reassign_reviewer(
        request.pull_request_id,
        request.old_user_id
    )
    return ReassignReviewerResponse(pr=pr, replaced_by=replaced_by)
