"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from app.services.assignment import AssignmentService


def get_assignment_service(request: Request) -> AssignmentService:
    """Return the engine created during application startup."""
    return request.app.state.assignment_service
