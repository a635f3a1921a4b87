"""
API Package

This package contains the HTTP adapter:
- teams, users, pull_requests: FastAPI routers
- errors: domain error to HTTP response mapping
- dependencies: access to the assignment engine
"""

from fastapi import APIRouter

from app.api.errors import register_exception_handlers
from app.api.pull_requests import router as pull_requests_router
from app.api.teams import router as teams_router
from app.api.users import router as users_router

router = APIRouter()
router.include_router(teams_router)
router.include_router(users_router)
router.include_router(pull_requests_router)

__all__ = ["router", "register_exception_handlers"]
