"""
State Store Module

Data access for teams, users and pull requests, without business rules.

Usage:
    store = StateStore(session_factory)
    async with store.transaction() as repo:
        pr = await repo.get_pr_locked("pr-1")
        ...
        await repo.update_pr(pr)

Everything done through one ``repo`` runs in a single transaction that
commits when the block exits normally and rolls back on any exception.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.logging_config import get_logger
from app.models import PullRequest, PullRequestShort, Team, TeamMember, User
from app.services.schema import PullRequestRow, ReviewerSlotRow, TeamRow, UserRow

logger = get_logger(__name__)

FOREIGN_KEY_VIOLATION = "23503"


class RecordNotFound(Exception):
    """A row the caller referenced does not exist."""
    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class RecordExists(Exception):
    """Insert collided with an existing row."""
    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} already exists: {key}")
        self.entity = entity
        self.key = key


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == FOREIGN_KEY_VIOLATION:
        return True
    if getattr(orig, "pgcode", None) == FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY" in str(orig).upper()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back without tzinfo
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_user(row: UserRow) -> User:
    return User(
        user_id=row.user_id,
        username=row.username,
        team_name=row.team_name,
        is_active=row.is_active,
    )


def _to_pull_request(row: PullRequestRow) -> PullRequest:
    return PullRequest(
        pull_request_id=row.pull_request_id,
        pull_request_name=row.pull_request_name,
        author_id=row.author_id,
        status=row.status,
        assigned_reviewers=[slot.user_id for slot in row.reviewers],
        created_at=_as_utc(row.created_at),
        merged_at=_as_utc(row.merged_at),
    )


class ReviewRepository:
    """Store primitives bound to one session and its transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # Teams & Users
    # =========================================================================

    async def create_team(self, team: Team) -> Team:
        """
        Insert a team and its members.

        Raises:
            RecordExists: Team name taken, or a member already belongs to a team
        """
        if await self.session.get(TeamRow, team.team_name) is not None:
            raise RecordExists("team", team.team_name)

        for member in team.members:
            existing = await self.session.get(UserRow, member.user_id)
            if existing is not None:
                raise RecordExists("user", member.user_id)

        self.session.add(TeamRow(team_name=team.team_name))
        self.session.add_all([
            UserRow(
                user_id=member.user_id,
                username=member.username,
                team_name=team.team_name,
                is_active=member.is_active,
            )
            for member in team.members
        ])

        try:
            await self.session.flush()
        except IntegrityError as e:
            raise RecordExists("team", team.team_name) from e

        return Team(
            team_name=team.team_name,
            members=sorted(team.members, key=lambda m: m.user_id),
        )

    async def get_team(self, team_name: str) -> Team:
        if await self.session.get(TeamRow, team_name) is None:
            raise RecordNotFound("team", team_name)

        members = await self.list_team_members(team_name)
        return Team(
            team_name=team_name,
            members=[
                TeamMember(user_id=u.user_id, username=u.username, is_active=u.is_active)
                for u in members
            ],
        )

    async def set_user_active(self, user_id: str, is_active: bool) -> User:
        row = await self.session.get(UserRow, user_id)
        if row is None:
            raise RecordNotFound("user", user_id)
        row.is_active = is_active
        await self.session.flush()
        return _to_user(row)

    async def get_user(self, user_id: str) -> User:
        row = await self.session.get(UserRow, user_id)
        if row is None:
            raise RecordNotFound("user", user_id)
        return _to_user(row)

    async def list_team_members(self, team_name: str) -> List[User]:
        result = await self.session.scalars(
            select(UserRow)
            .where(UserRow.team_name == team_name)
            .order_by(UserRow.user_id)
        )
        return [_to_user(row) for row in result]

    # =========================================================================
    # Pull Requests
    # =========================================================================

    async def create_pr(self, pr: PullRequest) -> PullRequest:
        """
        Insert a pull request with its reviewers.

        The store assigns created_at.

        Raises:
            RecordExists: Identifier already taken
            RecordNotFound: Author or a reviewer does not exist
        """
        if await self.session.get(PullRequestRow, pr.pull_request_id) is not None:
            raise RecordExists("pull_request", pr.pull_request_id)

        row = PullRequestRow(
            pull_request_id=pr.pull_request_id,
            pull_request_name=pr.pull_request_name,
            author_id=pr.author_id,
            status=pr.status,
            merged_at=pr.merged_at,
            reviewers=[
                ReviewerSlotRow(position=position, user_id=user_id)
                for position, user_id in enumerate(pr.assigned_reviewers)
            ],
        )
        self.session.add(row)

        try:
            await self.session.flush()
        except IntegrityError as e:
            if _is_foreign_key_violation(e):
                raise RecordNotFound("user", pr.author_id) from e
            raise RecordExists("pull_request", pr.pull_request_id) from e

        return _to_pull_request(row)

    async def get_pr_locked(self, pr_id: str) -> PullRequest:
        """
        Read a pull request and hold an exclusive lock on its row.

        The lock is released when the surrounding transaction ends.
        """
        stmt = (
            select(PullRequestRow)
            .where(PullRequestRow.pull_request_id == pr_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = (await self.session.scalars(stmt)).one_or_none()
        if row is None:
            raise RecordNotFound("pull_request", pr_id)
        return _to_pull_request(row)

    async def update_pr(self, pr: PullRequest) -> PullRequest:
        """
        Persist status, merge timestamp and reviewer list.

        Reviewer slots are updated position by position so that a replaced
        reviewer keeps its place in the list.
        """
        row = await self.session.get(PullRequestRow, pr.pull_request_id)
        if row is None:
            raise RecordNotFound("pull_request", pr.pull_request_id)

        row.status = pr.status
        row.merged_at = pr.merged_at

        slots = list(row.reviewers)
        for position, user_id in enumerate(pr.assigned_reviewers):
            if position < len(slots):
                slots[position].user_id = user_id
            else:
                row.reviewers.append(ReviewerSlotRow(position=position, user_id=user_id))
        for slot in slots[len(pr.assigned_reviewers):]:
            row.reviewers.remove(slot)

        await self.session.flush()
        await self.session.refresh(row)
        return _to_pull_request(row)

    async def list_prs_by_reviewer(self, user_id: str) -> List[PullRequestShort]:
        """Pull requests the user reviews, newest first."""
        result = await self.session.scalars(
            select(PullRequestRow)
            .join(ReviewerSlotRow)
            .where(ReviewerSlotRow.user_id == user_id)
            .order_by(PullRequestRow.created_at.desc(), PullRequestRow.pull_request_id)
        )
        return [
            PullRequestShort(
                pull_request_id=row.pull_request_id,
                pull_request_name=row.pull_request_name,
                author_id=row.author_id,
                status=row.status,
            )
            for row in result
        ]


class StateStore:
    """
    Hands out transactional repositories.

    Each ``transaction()`` opens its own session, so concurrent callers
    never share a connection.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[ReviewRepository]:
        async with self._session_factory() as session:
            async with session.begin():
                yield ReviewRepository(session)
