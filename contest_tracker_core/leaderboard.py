"""Leaderboard and moderation views over already-fetched records."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from .validation import ContestPost, User

# Default flag count that puts a post on the moderation list
DEFAULT_FLAG_THRESHOLD = 3


@dataclass(frozen=True)
class LeaderboardRow:
    user_id: str
    display_name: str
    total_count: int
    rank: int


@dataclass(frozen=True)
class LeaderInfo:
    leader: User | None
    leading_count: int
    is_tied: bool
    tied_count: int


def compute_totals(posts: Iterable[ContestPost]) -> Dict[str, int]:
    """Sum of counts per user over entry posts (join/invite posts carry none)."""
    totals: Dict[str, int] = defaultdict(int)
    for post in posts:
        if post.type != "entry":
            continue
        totals[post.user_id] += post.count
    return dict(totals)


def _sort_key(user: User) -> tuple[int, str, str]:
    return (-user.total_count, user.display_name.lower(), user.id)


def rank_users(users: Sequence[User]) -> List[LeaderboardRow]:
    """Highest total first; equal totals share a rank (1, 1, 3)."""
    rows: List[LeaderboardRow] = []
    prev_total: int | None = None
    rank = 0
    for position, user in enumerate(sorted(users, key=_sort_key), start=1):
        if user.total_count != prev_total:
            rank = position
            prev_total = user.total_count
        rows.append(
            LeaderboardRow(
                user_id=user.id,
                display_name=user.display_name,
                total_count=user.total_count,
                rank=rank,
            )
        )
    return rows


def contest_leader(users: Sequence[User]) -> LeaderInfo:
    """Highest total wins; among equal totals the first user given leads."""
    if not users:
        return LeaderInfo(leader=None, leading_count=0, is_tied=False, tied_count=0)

    leader = sorted(users, key=lambda u: -u.total_count)[0]
    tied = [u for u in users if u.total_count == leader.total_count]
    return LeaderInfo(
        leader=leader,
        leading_count=leader.total_count,
        is_tied=len(tied) > 1,
        tied_count=len(tied),
    )


def flagged_posts(
    posts: Iterable[ContestPost], threshold: int = DEFAULT_FLAG_THRESHOLD
) -> List[ContestPost]:
    """Posts with at least ``threshold`` flags, most flagged first."""
    if threshold < 1:
        raise ValueError("threshold must be at least 1")
    hits = [post for post in posts if len(post.fishy_flags) >= threshold]
    return sorted(hits, key=lambda p: -len(p.fishy_flags))
