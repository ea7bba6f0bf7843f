"""Contest lifecycle phases (pure, no I/O).

A contest moves through four phases, decided only by its dates and the
current instant:

- upcoming: now < startDate
- active: startDate <= now < endDate (posting allowed)
- review: endDate <= now < endOfReviewDate (only when a review date is set)
- completed: afterwards

Intervals are half-open, so a boundary instant belongs to the later phase.
Nothing is cached: callers re-evaluate (e.g. on a timer tick) to observe
transitions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal

from .errors import PostingClosedError
from .validation import Contest, as_utc

logger = logging.getLogger(__name__)

ContestPhase = Literal["upcoming", "active", "review", "completed"]

PHASE_ORDER: tuple[ContestPhase, ...] = ("upcoming", "active", "review", "completed")


@dataclass(frozen=True)
class PhaseSnapshot:
    """Phase plus the UI gates derived from it, all for the same instant."""

    phase: ContestPhase
    can_post: bool
    show_winner: bool
    show_countdown: bool


@dataclass(frozen=True)
class Countdown:
    time_remaining: timedelta
    formatted: str
    status_message: str
    phase: ContestPhase


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return as_utc(now)


def classify(contest: Contest, now: datetime | None = None) -> ContestPhase:
    """Return the contest's phase at ``now`` (defaults to the current UTC time)."""
    current = _resolve_now(now)

    if current < contest.start_date:
        return "upcoming"
    if current < contest.end_date:
        return "active"
    # now >= endDate
    review_end = contest.end_of_review_date
    if review_end is not None and current < review_end:
        return "review"
    return "completed"


def can_post(contest: Contest, now: datetime | None = None) -> bool:
    return classify(contest, now) == "active"


def should_show_winner(contest: Contest, now: datetime | None = None) -> bool:
    """Winner (rather than current leader) is shown once the contest has ended."""
    return classify(contest, now) in ("review", "completed")


def should_show_countdown(contest: Contest, now: datetime | None = None) -> bool:
    return classify(contest, now) in ("upcoming", "active")


def evaluate_phase(contest: Contest, now: datetime | None = None) -> PhaseSnapshot:
    """Classify once and derive every gate from that single result."""
    phase = classify(contest, now)
    return PhaseSnapshot(
        phase=phase,
        can_post=phase == "active",
        show_winner=phase in ("review", "completed"),
        show_countdown=phase in ("upcoming", "active"),
    )


def ensure_can_post(contest: Contest, now: datetime | None = None) -> ContestPhase:
    """Raise PostingClosedError unless the contest is active."""
    phase = classify(contest, now)
    if phase != "active":
        logger.warning(f"Rejected post for contest {contest.id or '<unnamed>'}: phase={phase}")
        raise PostingClosedError(phase)
    return phase


def format_time_remaining(remaining: timedelta) -> str:
    """Format a duration as ``HH:MM:SS``, prefixed with ``Nd`` when >= 1 day.

    Examples:
        - 0 → "00:00:00"
        - 1h 2m 3s → "01:02:03"
        - 2d 3h → "2d 03:00:00"
    """
    total_seconds = int(remaining.total_seconds())
    if total_seconds <= 0:
        return "00:00:00"

    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    clock = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days > 0:
        return f"{days}d {clock}"
    return clock


def countdown(contest: Contest, now: datetime | None = None) -> Countdown:
    """Time left until the next boundary a viewer cares about.

    Upcoming contests count down to the start, active ones to the end;
    review and completed contests have nothing left to count.
    """
    current = _resolve_now(now)
    phase = classify(contest, current)

    if phase == "upcoming":
        remaining = contest.start_date - current
        message = "Contest starts in:"
    elif phase == "active":
        remaining = contest.end_date - current
        message = "Contest ends in:"
    else:
        remaining = timedelta(0)
        message = "Contest ended"

    return Countdown(
        time_remaining=remaining,
        formatted=format_time_remaining(remaining),
        status_message=message,
        phase=phase,
    )
