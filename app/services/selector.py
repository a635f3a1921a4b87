"""
Candidate Selector Module

Pure functions deciding who may review a pull request and drawing reviewers
at random from that pool.

A member is a candidate when it is active and not excluded. The exclusion
set always holds the author; on reassignment it also holds every reviewer
currently on the pull request, the one being replaced included.
"""

import random
from typing import Collection, Iterable, List, Set

from app.models import User


def select_candidates(team_members: Iterable[User], exclude: Collection[str]) -> Set[str]:
    """
    Compute the ids of eligible reviewers.

    Args:
        team_members: Members of the team reviewers are drawn from
        exclude: User ids that must not be selected

    Returns:
        Set of candidate user ids (possibly empty)
    """
    excluded = set(exclude)
    return {
        member.user_id
        for member in team_members
        if member.is_active and member.user_id not in excluded
    }


def choose_random(candidates: Collection[str], count: int) -> List[str]:
    """
    Draw up to ``count`` distinct candidates uniformly at random.

    Each call uses its own OS-backed randomness source, so concurrent
    callers never share generator state. The result is a new list; the
    input collection is left untouched. An empty pool yields an empty list.
    """
    if count <= 0 or not candidates:
        return []

    # sorted() copies and gives sample() a sequence
    pool = sorted(candidates)
    return random.SystemRandom().sample(pool, min(count, len(pool)))
