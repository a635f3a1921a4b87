"""
Data Models Module

This module defines all Pydantic models used throughout the application.
Strong typing ensures data integrity and provides clear contracts between components.

Design Decisions:
- Use Pydantic models for all data transfer objects
- Strict validation to fail fast on invalid data
- Clear separation between domain models, request bodies and response wrappers
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


# =============================================================================
# Enums
# =============================================================================

class PRStatus(str, Enum):
    """Pull request lifecycle states."""
    OPEN = "OPEN"
    MERGED = "MERGED"


# =============================================================================
# Domain Models
# =============================================================================

class TeamMember(BaseModel):
    """A user as listed inside a team."""
    user_id: str
    username: str
    is_active: StrictBool

    @field_validator("user_id", "username")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _require_text(v)


class Team(BaseModel):
    """
    A team and its members.

    Members are listed ordered by user_id.
    """
    team_name: str
    members: List[TeamMember] = []

    @field_validator("team_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _require_text(v)

    @model_validator(mode="after")
    def validate_unique_members(self) -> "Team":
        """Reject requests listing the same user twice."""
        seen = set()
        for member in self.members:
            if member.user_id in seen:
                raise ValueError(f"duplicate member user_id: {member.user_id}")
            seen.add(member.user_id)
        return self


class User(BaseModel):
    """A user together with the team it belongs to."""
    user_id: str
    username: str
    team_name: str
    is_active: bool


class PullRequest(BaseModel):
    """
    A pull request with its assigned reviewers.

    Attributes:
        pull_request_id: Unique identifier
        pull_request_name: Human readable title
        author_id: User who opened the pull request
        status: OPEN or MERGED
        assigned_reviewers: Ordered list of 0-2 reviewer user ids
        created_at: Set once by the store on insert
        merged_at: Set once on the first transition to MERGED
    """
    model_config = ConfigDict(populate_by_name=True)

    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PRStatus = PRStatus.OPEN
    assigned_reviewers: List[str] = []
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    merged_at: Optional[datetime] = Field(default=None, alias="mergedAt")

    @property
    def is_merged(self) -> bool:
        return self.status == PRStatus.MERGED


class PullRequestShort(BaseModel):
    """Pull request summary used in reviewer listings."""
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PRStatus


# =============================================================================
# Request Models
# =============================================================================

class SetIsActiveRequest(BaseModel):
    user_id: str
    is_active: StrictBool

    @field_validator("user_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _require_text(v)


class CreatePullRequestRequest(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str

    @field_validator("pull_request_id", "pull_request_name", "author_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _require_text(v)


class MergePullRequestRequest(BaseModel):
    pull_request_id: str

    @field_validator("pull_request_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _require_text(v)


class ReassignReviewerRequest(BaseModel):
    """
    Reviewer reassignment request.

    Older clients send the reviewer as ``old_reviewer_id``; it is accepted
    and folded into ``old_user_id``, which wins when both are present.
    """
    pull_request_id: str
    old_user_id: str

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_field(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("old_user_id"):
            legacy = data.get("old_reviewer_id")
            if legacy:
                data = {**data, "old_user_id": legacy}
        return data

    @field_validator("pull_request_id", "old_user_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _require_text(v)


# =============================================================================
# Response Models
# =============================================================================

class TeamResponse(BaseModel):
    team: Team


class UserResponse(BaseModel):
    user: User


class PullRequestResponse(BaseModel):
    pr: PullRequest


class ReassignReviewerResponse(BaseModel):
    pr: PullRequest
    replaced_by: str


class UserReviewsResponse(BaseModel):
    user_id: str
    pull_requests: List[PullRequestShort] = []


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail
