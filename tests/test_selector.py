"""
Tests for Candidate Selection

Tests eligibility filtering and random reviewer draws.
"""

from app.models import User
from app.services.selector import choose_random, select_candidates


def _user(user_id: str, active: bool = True) -> User:
    return User(user_id=user_id, username=user_id, team_name="backend", is_active=active)


class TestSelectCandidates:
    """Test suite for select_candidates."""

    def test_excludes_author(self):
        members = [_user("u1"), _user("u2"), _user("u3")]

        assert select_candidates(members, {"u1"}) == {"u2", "u3"}

    def test_excludes_inactive_members(self):
        members = [_user("u1"), _user("u2", active=False), _user("u3")]

        assert select_candidates(members, {"u1"}) == {"u3"}

    def test_excludes_current_reviewers(self):
        members = [_user(f"u{i}") for i in range(1, 6)]

        result = select_candidates(members, {"u1", "u2", "u3"})

        assert result == {"u4", "u5"}

    def test_empty_team(self):
        assert select_candidates([], {"u1"}) == set()

    def test_everyone_excluded(self):
        members = [_user("u1"), _user("u2")]

        assert select_candidates(members, {"u1", "u2"}) == set()


class TestChooseRandom:
    """Test suite for choose_random."""

    def test_returns_requested_count(self):
        result = choose_random({"a", "b", "c", "d"}, 2)

        assert len(result) == 2
        assert len(set(result)) == 2
        assert set(result) <= {"a", "b", "c", "d"}

    def test_caps_at_pool_size(self):
        result = choose_random({"a"}, 2)

        assert result == ["a"]

    def test_empty_pool(self):
        assert choose_random(set(), 2) == []
        assert choose_random([], 1) == []

    def test_zero_count(self):
        assert choose_random({"a", "b"}, 0) == []

    def test_result_is_independent_copy(self):
        candidates = ["a", "b"]

        result = choose_random(candidates, 2)
        result.append("z")

        assert candidates == ["a", "b"]

    def test_input_not_reordered(self):
        candidates = ["d", "c", "b", "a"]

        for _ in range(20):
            choose_random(candidates, 2)

        assert candidates == ["d", "c", "b", "a"]

    def test_every_candidate_can_be_drawn(self):
        candidates = {"a", "b", "c"}
        seen = set()

        for _ in range(200):
            seen.update(choose_random(candidates, 1))

        assert seen == candidates
