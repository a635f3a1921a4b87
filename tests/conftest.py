"""
Test Configuration

Pytest configuration and fixtures for the test suite.
Every test gets its own SQLite database file.
"""

from typing import AsyncGenerator, Callable, Generator, Iterable, Tuple

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.models import Team, TeamMember
from app.services import (
    AssignmentService,
    StateStore,
    create_engine,
    create_schema,
    create_session_factory,
)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'reviewers.db'}",
        database_connect_attempts=1,
        database_connect_wait=0,
        log_level="WARNING",
        log_json_format=False,
    )


@pytest.fixture
async def engine(settings):
    """Engine with the schema created."""
    engine = create_engine(settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine) -> StateStore:
    return StateStore(create_session_factory(engine))


@pytest.fixture
def service(store) -> AssignmentService:
    return AssignmentService(store)


@pytest.fixture
def client(settings) -> Generator[TestClient, None, None]:
    """Create a test client for synchronous tests."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def build_team() -> Callable[[str, Iterable[Tuple[str, bool]]], Team]:
    """Factory for teams whose members are given as (user_id, is_active) pairs."""
    def _build(name: str, members: Iterable[Tuple[str, bool]]) -> Team:
        return Team(
            team_name=name,
            members=[
                TeamMember(user_id=user_id, username=f"name-{user_id}", is_active=active)
                for user_id, active in members
            ],
        )
    return _build


@pytest.fixture
async def backend_team(service, build_team) -> AsyncGenerator[Team, None]:
    """Team T = {u1, u2, u3}, all active."""
    team = await service.create_team(
        build_team("backend", [("u1", True), ("u2", True), ("u3", True)])
    )
    yield team


@pytest.fixture
def team_payload() -> dict:
    """Sample team creation payload."""
    return {
        "team_name": "backend",
        "members": [
            {"user_id": "u1", "username": "Alice", "is_active": True},
            {"user_id": "u2", "username": "Bob", "is_active": True},
            {"user_id": "u3", "username": "Carol", "is_active": True},
        ],
    }
