"""
Domain Errors Module

Every error the service reports to callers derives from ReviewServiceError
and carries a stable symbolic code plus the HTTP status the API answers with.
"""

from fastapi import status


class ReviewServiceError(Exception):
    """Base exception for domain errors."""

    code: str = "INTERNAL_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotFoundError(ReviewServiceError):
    """A referenced team, user or pull request does not exist."""
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "resource not found"


class BadRequestError(ReviewServiceError):
    """Malformed request payload or parameters."""
    code = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid request payload or parameters"


class AlreadyExistsError(ReviewServiceError):
    """An entity with the same identifier already exists."""
    code = "ALREADY_EXISTS"
    status_code = status.HTTP_409_CONFLICT
    default_message = "resource already exists"


class TeamExistsError(AlreadyExistsError):
    code = "TEAM_EXISTS"
    default_message = "team_name already exists"


class UserExistsError(AlreadyExistsError):
    code = "USER_EXISTS"
    default_message = "user already belongs to another team"


class PullRequestExistsError(AlreadyExistsError):
    code = "PR_EXISTS"
    default_message = "PR id already exists"


class AlreadyMergedError(ReviewServiceError):
    """Mutation attempted on a merged pull request."""
    code = "PR_MERGED"
    status_code = status.HTTP_409_CONFLICT
    default_message = "cannot reassign on merged PR"


class NotAssignedError(ReviewServiceError):
    code = "NOT_ASSIGNED"
    status_code = status.HTTP_409_CONFLICT
    default_message = "reviewer is not assigned to this PR"


class NoCandidateError(ReviewServiceError):
    code = "NO_CANDIDATE"
    status_code = status.HTTP_409_CONFLICT
    default_message = "no active replacement candidate in team"
