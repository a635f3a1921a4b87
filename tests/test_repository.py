"""
Tests for the State Store

Tests store primitives and transaction rollback.
"""

from datetime import datetime, timezone

import pytest

from app.config import Settings
from app.models import PRStatus, PullRequest
from app.services.database import DatabaseUnavailableError, create_engine, wait_for_database
from app.services.repository import RecordExists, RecordNotFound


@pytest.fixture
def seed(store, build_team):
    """Insert a team straight through the store."""
    async def _seed(team_name="backend", members=(("u1", True), ("u2", True), ("u3", True))):
        async with store.transaction() as repo:
            await repo.create_team(build_team(team_name, members))
    return _seed


def _pr(pr_id: str, author: str = "u1", reviewers=("u2", "u3")) -> PullRequest:
    return PullRequest(
        pull_request_id=pr_id,
        pull_request_name=f"PR {pr_id}",
        author_id=author,
        assigned_reviewers=list(reviewers),
    )


class TestTeamsAndUsers:
    """Team and user primitives."""

    async def test_list_team_members_ordered(self, store, seed):
        await seed(members=(("u3", True), ("u1", False), ("u2", True)))

        async with store.transaction() as repo:
            members = await repo.list_team_members("backend")

        assert [m.user_id for m in members] == ["u1", "u2", "u3"]
        assert all(m.team_name == "backend" for m in members)

    async def test_list_members_of_unknown_team(self, store):
        async with store.transaction() as repo:
            assert await repo.list_team_members("ghost") == []

    async def test_duplicate_team(self, store, seed):
        await seed()

        with pytest.raises(RecordExists) as exc_info:
            await seed(members=(("u9", True),))

        assert exc_info.value.entity == "team"

    async def test_get_user(self, store, seed):
        await seed()

        async with store.transaction() as repo:
            user = await repo.get_user("u2")

        assert user.user_id == "u2"
        assert user.username == "name-u2"
        assert user.is_active is True

    async def test_get_missing_user(self, store):
        with pytest.raises(RecordNotFound) as exc_info:
            async with store.transaction() as repo:
                await repo.get_user("ghost")

        assert exc_info.value.entity == "user"


class TestPullRequests:
    """Pull request primitives."""

    async def test_create_assigns_created_at(self, store, seed):
        await seed()
        before = datetime.now(timezone.utc)

        async with store.transaction() as repo:
            created = await repo.create_pr(_pr("pr-1"))

        assert created.created_at >= before
        assert created.status == PRStatus.OPEN

        async with store.transaction() as repo:
            loaded = await repo.get_pr_locked("pr-1")

        assert loaded.assigned_reviewers == ["u2", "u3"]
        assert loaded.created_at == created.created_at

    async def test_create_with_unknown_author(self, store, seed):
        await seed()

        with pytest.raises(RecordNotFound):
            async with store.transaction() as repo:
                await repo.create_pr(_pr("pr-1", author="ghost", reviewers=()))

    async def test_create_duplicate(self, store, seed):
        await seed()
        async with store.transaction() as repo:
            await repo.create_pr(_pr("pr-1"))

        with pytest.raises(RecordExists):
            async with store.transaction() as repo:
                await repo.create_pr(_pr("pr-1"))

    async def test_get_locked_missing(self, store):
        with pytest.raises(RecordNotFound):
            async with store.transaction() as repo:
                await repo.get_pr_locked("ghost")

    async def test_update_keeps_positions(self, store, seed):
        await seed(members=(("u1", True), ("u2", True), ("u3", True), ("u4", True)))
        async with store.transaction() as repo:
            await repo.create_pr(_pr("pr-1"))

        async with store.transaction() as repo:
            pr = await repo.get_pr_locked("pr-1")
            pr.assigned_reviewers[0] = "u4"
            updated = await repo.update_pr(pr)

        assert updated.assigned_reviewers == ["u4", "u3"]

        async with store.transaction() as repo:
            assert (await repo.get_pr_locked("pr-1")).assigned_reviewers == ["u4", "u3"]

    async def test_update_missing(self, store):
        with pytest.raises(RecordNotFound):
            async with store.transaction() as repo:
                await repo.update_pr(_pr("ghost"))

    async def test_failed_transaction_rolls_back(self, store, seed):
        await seed()
        async with store.transaction() as repo:
            await repo.create_pr(_pr("pr-1"))

        with pytest.raises(RuntimeError):
            async with store.transaction() as repo:
                pr = await repo.get_pr_locked("pr-1")
                pr.status = PRStatus.MERGED
                pr.merged_at = datetime.now(timezone.utc)
                await repo.update_pr(pr)
                raise RuntimeError("boom")

        async with store.transaction() as repo:
            pr = await repo.get_pr_locked("pr-1")

        assert pr.status == PRStatus.OPEN
        assert pr.merged_at is None

    async def test_list_by_reviewer_newest_first(self, store, seed):
        await seed()
        async with store.transaction() as repo:
            await repo.create_pr(_pr("pr-a"))
        async with store.transaction() as repo:
            await repo.create_pr(_pr("pr-b", reviewers=("u3",)))
        async with store.transaction() as repo:
            await repo.create_pr(_pr("pr-c"))

        async with store.transaction() as repo:
            for_u2 = await repo.list_prs_by_reviewer("u2")
            for_u3 = await repo.list_prs_by_reviewer("u3")

        assert [p.pull_request_id for p in for_u2] == ["pr-c", "pr-a"]
        assert [p.pull_request_id for p in for_u3] == ["pr-c", "pr-b", "pr-a"]
        assert for_u2[0].author_id == "u1"


class TestDatabase:
    """Engine setup and startup probe."""

    async def test_wait_for_database(self, engine, settings):
        await wait_for_database(engine, settings)

    async def test_unreachable_database(self, tmp_path):
        settings = Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}",
            database_connect_attempts=2,
            database_connect_wait=0,
        )
        engine = create_engine(settings)

        with pytest.raises(DatabaseUnavailableError):
            await wait_for_database(engine, settings)

        await engine.dispose()

    async def test_foreign_keys_enforced(self, store, seed):
        await seed()

        with pytest.raises(RecordNotFound):
            async with store.transaction() as repo:
                await repo.create_pr(_pr("pr-1", reviewers=("u2", "ghost")))
