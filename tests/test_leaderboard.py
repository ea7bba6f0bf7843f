from datetime import datetime, timedelta, timezone

import pytest

from contest_tracker_core import (
    Contest,
    ContestPost,
    PostDraft,
    PostingClosedError,
    User,
    compute_totals,
    contest_leader,
    flagged_posts,
    prepare_post,
    rank_users,
)

UTC = timezone.utc
TS = datetime(2024, 7, 4, 12, 30, tzinfo=UTC)


def _post(post_id: str, user_id: str, count: int, **extra) -> ContestPost:
    return ContestPost.model_validate(
        {"id": post_id, "userId": user_id, "count": count, "timestamp": TS, **extra}
    )


def _user(user_id: str, total: int, name: str | None = None) -> User:
    return User(id=user_id, display_name=name or user_id.upper(), total_count=total)


def test_compute_totals_counts_entries_only():
    posts = [
        _post("1", "a", 3),
        _post("2", "a", 4),
        _post("3", "b", 2),
        _post("4", "b", 0, type="join"),
    ]
    assert compute_totals(posts) == {"a": 7, "b": 2}


def test_rank_users_shares_ranks_for_ties():
    rows = rank_users([_user("c", 5), _user("a", 10), _user("b", 10)])
    assert [(r.user_id, r.rank) for r in rows] == [("a", 1), ("b", 1), ("c", 3)]


def test_contest_leader_reports_ties():
    info = contest_leader([_user("a", 10), _user("b", 12), _user("c", 12)])
    assert info.leader.id == "b"
    assert info.leading_count == 12
    assert info.is_tied is True
    assert info.tied_count == 2


def test_contest_leader_empty():
    info = contest_leader([])
    assert info.leader is None
    assert info.leading_count == 0
    assert info.is_tied is False


def test_flagged_posts_threshold_and_order():
    posts = [
        _post("1", "a", 1, fishyFlags=["x"]),
        _post("2", "a", 1, fishyFlags=["x", "y", "z"]),
        _post("3", "a", 1, fishyFlags=["x", "y", "z", "w"]),
    ]
    assert [p.id for p in flagged_posts(posts)] == ["3", "2"]
    assert [p.id for p in flagged_posts(posts, threshold=1)] == ["3", "2", "1"]
    with pytest.raises(ValueError):
        flagged_posts(posts, threshold=0)


def test_prepare_post_only_while_active():
    contest = Contest(
        id="hotdog-contest",
        start_date=datetime(2024, 7, 4, 12, 0, tzinfo=UTC),
        end_date=datetime(2024, 7, 4, 13, 0, tzinfo=UTC),
    )
    draft = PostDraft(count=5, description="Round two")

    post = prepare_post(contest, draft, "u1", "Joey", now=TS)
    assert post.contest_id == "hotdog-contest"
    assert post.count == 5
    assert post.timestamp == TS
    assert post.reactions == {}
    assert post.fishy_flags == ()

    with pytest.raises(PostingClosedError):
        prepare_post(contest, draft, "u1", "Joey", now=TS + timedelta(hours=1))


def test_contest_leader_tie_keeps_input_order():
    # names would sort "B" before "C"; the first user given still leads
    info = contest_leader([_user("c", 12), _user("b", 12), _user("a", 3)])
    assert info.leader.id == "c"
    assert info.tied_count == 2
