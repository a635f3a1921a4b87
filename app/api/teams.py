"""
Team Endpoints

POST /team/add creates a team with its members; GET /team/get reads one back.
"""

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_assignment_service
from app.models import ErrorResponse, Team, TeamResponse
from app.services.assignment import AssignmentService

router = APIRouter(prefix="/team", tags=["teams"])


@router.post(
    "/add",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_team(
    team: Team,
    service: AssignmentService = Depends(get_assignment_service),
) -> TeamResponse:
    """Create a team together with its members; every member must be a new user."""
    created = await service.create_team(team)
    return TeamResponse(team=created)


@router.get(
    "/get",
    response_model=Team,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_team(
    team_name: str = Query(min_length=1),
    service: AssignmentService = Depends(get_assignment_service),
) -> Team:
    """Return a team with its members ordered by user id."""
    return await service.get_team(team_name)
