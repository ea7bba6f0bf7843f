from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from contest_tracker_core import (
    PHASE_ORDER,
    Contest,
    PostingClosedError,
    can_post,
    classify,
    countdown,
    ensure_can_post,
    evaluate_phase,
    should_show_countdown,
    should_show_winner,
)
from contest_tracker_core.phase import format_time_remaining

UTC = timezone.utc
START = datetime(2024, 7, 4, 12, 0, tzinfo=UTC)
END = datetime(2024, 7, 4, 13, 0, tzinfo=UTC)
REVIEW_END = datetime(2024, 7, 5, 13, 0, tzinfo=UTC)


def _contest(review: bool = True) -> Contest:
    return Contest(
        id="hotdog-contest",
        start_date=START,
        end_date=END,
        end_of_review_date=REVIEW_END if review else None,
    )


def test_july_fourth_scenario():
    contest = _contest()
    assert classify(contest, datetime(2024, 7, 4, 11, 59, tzinfo=UTC)) == "upcoming"

    mid = datetime(2024, 7, 4, 12, 30, tzinfo=UTC)
    assert classify(contest, mid) == "active"
    assert can_post(contest, mid) is True

    evening = datetime(2024, 7, 4, 18, 0, tzinfo=UTC)
    assert classify(contest, evening) == "review"
    assert should_show_winner(contest, evening) is True

    assert classify(contest, datetime(2024, 7, 6, tzinfo=UTC)) == "completed"


def test_boundaries_belong_to_later_phase():
    contest = _contest()
    assert classify(contest, START) == "active"
    assert classify(contest, END) == "review"
    assert classify(contest, REVIEW_END) == "completed"
    assert classify(contest, START - timedelta(microseconds=1)) == "upcoming"


def test_no_review_date_goes_straight_to_completed():
    contest = _contest(review=False)
    assert classify(contest, END - timedelta(seconds=1)) == "active"
    assert classify(contest, END) == "completed"

    now = START - timedelta(hours=2)
    while now < REVIEW_END + timedelta(days=1):
        assert classify(contest, now) != "review"
        now += timedelta(minutes=20)


def test_review_date_equal_to_end_skips_review():
    contest = Contest(start_date=START, end_date=END, end_of_review_date=END)
    assert classify(contest, END) == "completed"


def test_phase_never_goes_backwards():
    contest = _contest()
    now = START - timedelta(hours=1)
    last = 0
    while now < REVIEW_END + timedelta(hours=1):
        idx = PHASE_ORDER.index(classify(contest, now))
        assert idx >= last
        last = idx
        now += timedelta(minutes=15)
    assert PHASE_ORDER[last] == "completed"


def test_gates_partition_phases():
    contest = _contest()
    instants = {
        "upcoming": START - timedelta(minutes=1),
        "active": START + timedelta(minutes=1),
        "review": END + timedelta(minutes=1),
        "completed": REVIEW_END + timedelta(minutes=1),
    }
    for phase, now in instants.items():
        snap = evaluate_phase(contest, now)
        assert snap.phase == phase
        assert snap.can_post == (phase == "active")
        assert snap.show_countdown == (phase in ("upcoming", "active"))
        assert snap.show_winner == (phase in ("review", "completed"))
        assert snap.show_countdown != snap.show_winner
        assert should_show_countdown(contest, now) == snap.show_countdown
        assert should_show_winner(contest, now) == snap.show_winner
        assert can_post(contest, now) == snap.can_post


def test_naive_now_is_treated_as_utc():
    contest = _contest()
    assert classify(contest, datetime(2024, 7, 4, 12, 30)) == "active"


def test_other_timezones_compare_by_instant():
    contest = _contest()
    eastern = timezone(timedelta(hours=-4))
    # 08:30 EDT == 12:30 UTC
    assert classify(contest, datetime(2024, 7, 4, 8, 30, tzinfo=eastern)) == "active"


def test_default_now_uses_wall_clock():
    far_future = Contest(
        start_date=datetime(2999, 1, 1, tzinfo=UTC),
        end_date=datetime(2999, 1, 2, tzinfo=UTC),
    )
    assert classify(far_future) == "upcoming"


def test_invalid_date_order_is_rejected():
    with pytest.raises(ValidationError):
        Contest(start_date=END, end_date=START)
    with pytest.raises(ValidationError):
        Contest(start_date=START, end_date=REVIEW_END, end_of_review_date=END)


def test_contest_parses_store_document():
    contest = Contest.model_validate(
        {
            "id": "c1",
            "startDate": "2024-07-04T12:00:00Z",
            "endDate": "2024-07-04T13:00:00Z",
            "endOfReviewDate": None,
            "somethingElse": 1,
        }
    )
    assert contest.start_date == START
    assert contest.end_of_review_date is None


def test_ensure_can_post_rejects_outside_active():
    contest = _contest()
    assert ensure_can_post(contest, START) == "active"
    with pytest.raises(PostingClosedError) as excinfo:
        ensure_can_post(contest, END)
    assert excinfo.value.phase == "review"


def test_countdown_targets_next_boundary():
    contest = _contest()

    before = countdown(contest, START - timedelta(hours=1, minutes=2, seconds=3))
    assert before.status_message == "Contest starts in:"
    assert before.formatted == "01:02:03"

    during = countdown(contest, START + timedelta(minutes=30))
    assert during.status_message == "Contest ends in:"
    assert during.time_remaining == timedelta(minutes=30)

    after = countdown(contest, END)
    assert after.status_message == "Contest ended"
    assert after.formatted == "00:00:00"
    assert after.phase == "review"


def test_format_time_remaining_with_days():
    assert format_time_remaining(timedelta(days=2, hours=3)) == "2d 03:00:00"
    assert format_time_remaining(timedelta(seconds=-5)) == "00:00:00"
