"""
Assignment Engine Module

This module implements the public operations of the reviewer service:
team and user management plus the pull request workflow.

Design Decisions:
- Every operation runs inside exactly one store transaction; any error
  rolls it back, so no partial state is ever visible
- Merge and reassignment take an exclusive lock on the pull request row
  before reading it, which serializes concurrent mutation of one PR while
  leaving other PRs unaffected
- No retries: storage failures surface unchanged to the caller
- Store-level errors are translated into domain errors here
"""

from datetime import datetime, timezone
from typing import List, Tuple

from app.errors import (
    AlreadyMergedError,
    NoCandidateError,
    NotAssignedError,
    NotFoundError,
    PullRequestExistsError,
    TeamExistsError,
    UserExistsError,
)
from app.logging_config import get_logger
from app.models import PRStatus, PullRequest, PullRequestShort, Team, User
from app.services.repository import RecordExists, RecordNotFound, StateStore
from app.services.selector import choose_random, select_candidates

logger = get_logger(__name__)

DEFAULT_MAX_REVIEWERS = 2


class AssignmentService:
    """
    Reviewer assignment engine.

    Usage:
        service = AssignmentService(StateStore(session_factory))
        pr = await service.create_pull_request("pr-1", "Add search", "u1")
        pr, replaced_by = await service.reassign_reviewer("pr-1", "u2")
        pr = await service.merge_pull_request("pr-1")
    """

    def __init__(self, store: StateStore, max_reviewers: int = DEFAULT_MAX_REVIEWERS):
        self.store = store
        self.max_reviewers = max_reviewers

    # =========================================================================
    # Teams & Users
    # =========================================================================

    async def create_team(self, team: Team) -> Team:
        """
        Create a team together with its members.

        Raises:
            TeamExistsError: Team name already taken
            UserExistsError: A member already belongs to a team
        """
        try:
            async with self.store.transaction() as repo:
                created = await repo.create_team(team)
        except RecordExists as e:
            if e.entity == "user":
                raise UserExistsError(
                    f"user {e.key} already belongs to a team"
                ) from e
            raise TeamExistsError(f"{team.team_name} already exists") from e

        logger.info(
            "Team created",
            team_name=created.team_name,
            num_members=len(created.members)
        )
        return created

    async def get_team(self, team_name: str) -> Team:
        try:
            async with self.store.transaction() as repo:
                return await repo.get_team(team_name)
        except RecordNotFound as e:
            raise NotFoundError(str(e)) from e

    async def set_user_active_status(self, user_id: str, is_active: bool) -> User:
        try:
            async with self.store.transaction() as repo:
                user = await repo.set_user_active(user_id, is_active)
        except RecordNotFound as e:
            raise NotFoundError(str(e)) from e

        logger.info("User activity changed", user_id=user_id, is_active=is_active)
        return user

    async def get_user_review_prs(self, user_id: str) -> List[PullRequestShort]:
        """Pull requests where the user is a reviewer, newest first. Unknown users have none."""
        async with self.store.transaction() as repo:
            return await repo.list_prs_by_reviewer(user_id)

    # =========================================================================
    # Pull Requests
    # =========================================================================

    async def create_pull_request(self, pr_id: str, name: str, author_id: str) -> PullRequest:
        """
        Create a pull request and assign reviewers from the author's team.

        Up to ``max_reviewers`` active teammates are chosen; a team too small
        to fill every slot yields fewer reviewers, never an error.

        Raises:
            NotFoundError: Author does not exist
            PullRequestExistsError: Identifier already taken
        """
        try:
            async with self.store.transaction() as repo:
                author = await repo.get_user(author_id)
                members = await repo.list_team_members(author.team_name)

                candidates = select_candidates(members, exclude={author_id})
                reviewers = choose_random(candidates, self.max_reviewers)

                pr = await repo.create_pr(PullRequest(
                    pull_request_id=pr_id,
                    pull_request_name=name,
                    author_id=author_id,
                    status=PRStatus.OPEN,
                    assigned_reviewers=reviewers,
                ))
        except RecordExists as e:
            raise PullRequestExistsError(f"{pr_id} already exists") from e
        except RecordNotFound as e:
            raise NotFoundError(str(e)) from e

        logger.info(
            "Pull request created",
            pr_id=pr_id,
            author_id=author_id,
            reviewers=pr.assigned_reviewers
        )
        return pr

    async def merge_pull_request(self, pr_id: str) -> PullRequest:
        """
        Mark a pull request MERGED.

        Idempotent: merging an already merged pull request returns it
        unchanged, keeping the timestamp of the first merge.

        Raises:
            NotFoundError: Pull request does not exist
        """
        try:
            async with self.store.transaction() as repo:
                current = await repo.get_pr_locked(pr_id)
                if current.is_merged:
                    logger.debug("Pull request already merged", pr_id=pr_id)
                    return current

                current.status = PRStatus.MERGED
                current.merged_at = datetime.now(timezone.utc)
                merged = await repo.update_pr(current)
        except RecordNotFound as e:
            raise NotFoundError(str(e)) from e

        logger.info("Pull request merged", pr_id=pr_id, merged_at=merged.merged_at)
        return merged

    async def reassign_reviewer(self, pr_id: str, old_user_id: str) -> Tuple[PullRequest, str]:
        """
        Replace one reviewer with another active member of that reviewer's team.

        The replacement takes the old reviewer's position in the list.

        Returns:
            Tuple of the updated pull request and the new reviewer's id

        Raises:
            NotFoundError: Pull request or user does not exist
            AlreadyMergedError: Pull request is merged
            NotAssignedError: User is not a reviewer of the pull request
            NoCandidateError: Nobody is eligible to take over
        """
        try:
            async with self.store.transaction() as repo:
                current = await repo.get_pr_locked(pr_id)
                if current.is_merged:
                    raise AlreadyMergedError()

                old_user = await repo.get_user(old_user_id)
                if old_user_id not in current.assigned_reviewers:
                    raise NotAssignedError()

                members = await repo.list_team_members(old_user.team_name)
                exclude = {current.author_id, old_user_id, *current.assigned_reviewers}
                chosen = choose_random(select_candidates(members, exclude), 1)
                if not chosen:
                    raise NoCandidateError()
                replaced_by = chosen[0]

                position = current.assigned_reviewers.index(old_user_id)
                current.assigned_reviewers[position] = replaced_by
                updated = await repo.update_pr(current)
        except RecordNotFound as e:
            raise NotFoundError(str(e)) from e

        logger.info(
            "Reviewer reassigned",
            pr_id=pr_id,
            old_user_id=old_user_id,
            replaced_by=replaced_by
        )
        return updated, replaced_by
