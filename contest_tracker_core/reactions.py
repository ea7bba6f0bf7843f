"""Post reactions and suspicious-post flags (pure, no I/O).

Reaction state lives on the post as ``reactions`` (emoji -> userIds) and
``fishyFlags`` (userIds). A viewer holds at most one emoji per post;
picking another emoji moves them, picking the same one clears it. Flags are
independent of reactions.

Posts written before the reaction model carry ``upvotes`` instead; the read
view folds them into the 👍 entry without touching the record (see
``migration`` for the persisted conversion).

Nothing here writes to the store. Toggles return the resulting state plus an
``updates`` payload; the caller persists it (last write wins on the field).
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from .errors import ReactionError, ValidationError
from .validation import ContestPost

logger = logging.getLogger(__name__)

THUMBS_UP = "👍"
FLAG_EMOJI = "🐟"

# Picker order; value is the human title
REACTION_EMOJIS: Dict[str, str] = {
    THUMBS_UP: "Thumbs up",
    "❤️": "Love",
    "😍": "Heart eyes",
    "🎉": "Celebrate",
    "🔥": "Fire",
    "💯": "Perfect",
    "😂": "Laugh",
    "🤔": "Thinking",
}

# Verb phrase used in the owner rejection message
_OWN_POST_PHRASES: Dict[str, str] = {"react": "react to", "flag": "flag"}


@dataclass(frozen=True)
class NormalizedReactions:
    """Read-only reaction view of a post."""

    reactions: Mapping[str, tuple[str, ...]]
    fishy_flags: tuple[str, ...]
    # True when legacy upvotes were folded into the 👍 entry
    legacy_shim_applied: bool = False

    def find_user_reaction(self, viewer_id: str | None) -> str | None:
        if not viewer_id:
            return None
        for emoji, user_ids in self.reactions.items():
            if viewer_id in user_ids:
                return emoji
        return None

    def has_flagged(self, viewer_id: str | None) -> bool:
        return bool(viewer_id) and viewer_id in self.fishy_flags

    def entries(self) -> list[tuple[str, tuple[str, ...]]]:
        """Non-empty reactions, most popular first (ties keep stored order)."""
        non_empty = [(emoji, ids) for emoji, ids in self.reactions.items() if ids]
        return sorted(non_empty, key=lambda item: -len(item[1]))

    @property
    def total(self) -> int:
        return sum(len(ids) for ids in self.reactions.values())

    @property
    def flag_count(self) -> int:
        return len(self.fishy_flags)


@dataclass(frozen=True)
class ReactionSummary:
    visible: tuple[tuple[str, int], ...]
    hidden: int
    total: int
    user_reaction: str | None


@dataclass
class ReactionOutcome:
    """Result of a reaction toggle, ready to persist."""

    reactions: Dict[str, List[str]]
    previous: str | None
    current: str | None
    updates: Dict[str, Any]


@dataclass
class FlagOutcome:
    fishy_flags: List[str]
    flagged: bool
    updates: Dict[str, Any]


def normalize(post: ContestPost) -> NormalizedReactions:
    """Build the reaction view of ``post``.

    Legacy ``upvotes`` become the 👍 entry only when that key is absent.
    A present-but-empty 👍 list counts as present, so clearing the last 👍
    never brings the legacy upvotes back.
    """
    reactions: Dict[str, tuple[str, ...]] = {
        emoji: tuple(user_ids) for emoji, user_ids in post.reactions.items()
    }
    legacy = post.upvotes or ()
    shim_applied = False
    if legacy and THUMBS_UP not in reactions:
        reactions[THUMBS_UP] = tuple(legacy)
        shim_applied = True

    return NormalizedReactions(
        reactions=MappingProxyType(reactions),
        fishy_flags=tuple(post.fishy_flags),
        legacy_shim_applied=shim_applied,
    )


def check_viewer(
    post: ContestPost, viewer_id: str | None, action: str = "react"
) -> ValidationError | None:
    """Pure precondition check for reacting to or flagging ``post``.

    Returns ValidationError if rejected, otherwise None.

    Rules:
        1. No viewer id → unauthenticated (401)
        2. Viewer owns the post → own_post (403)
    """
    if not viewer_id:
        return ValidationError(
            kind="unauthenticated",
            message=f"Sign in to {action}",
            status_code=401,
        )
    if viewer_id == post.user_id:
        return ValidationError(
            kind="own_post",
            message=f"You can't {_OWN_POST_PHRASES.get(action, action)} your own post",
            status_code=403,
        )
    return None


def _reject(post: ContestPost, error: ValidationError) -> ReactionError:
    logger.warning(f"Rejected {error.kind} on post {post.id}: {error.message}")
    return ReactionError(error)


def toggle_reaction(
    post: ContestPost, viewer_id: str | None, emoji: str
) -> ReactionOutcome:
    """Toggle ``emoji`` for ``viewer_id`` on ``post``.

    Behavior:
        - viewer already has ``emoji`` → removed (no reaction left)
        - viewer has another emoji → moved to ``emoji``
        - viewer has no reaction → added under ``emoji``

    The viewer is stripped from every other set before adding, so the result
    never lists them twice even if stored data did.

    Raises:
        ReactionError: unauthenticated viewer, post owner, or unknown emoji
    """
    error = check_viewer(post, viewer_id, action="react")
    if error is None and emoji not in REACTION_EMOJIS:
        error = ValidationError(
            kind="unknown_emoji",
            message=f"Unsupported reaction: {emoji}",
            status_code=400,
        )
    if error is not None:
        raise _reject(post, error)

    view = normalize(post)
    previous = view.find_user_reaction(viewer_id)

    new_reactions: Dict[str, List[str]] = {
        key: [uid for uid in user_ids if uid != viewer_id]
        for key, user_ids in view.reactions.items()
    }
    if previous == emoji:
        current = None
    else:
        new_reactions.setdefault(emoji, []).append(viewer_id)
        current = emoji

    updates: Dict[str, Any] = {
        "reactions": {key: list(ids) for key, ids in new_reactions.items()}
    }
    if view.legacy_shim_applied:
        # 👍 now carries the upvotes, the legacy list can go with this write
        updates["upvotes"] = []

    logger.debug(f"Reaction on post {post.id} by {viewer_id}: {previous} → {current}")
    return ReactionOutcome(
        reactions=new_reactions, previous=previous, current=current, updates=updates
    )


def toggle_flag(post: ContestPost, viewer_id: str | None) -> FlagOutcome:
    """Add or remove ``viewer_id`` from the post's suspicious flags.

    Raises:
        ReactionError: unauthenticated viewer or post owner
    """
    error = check_viewer(post, viewer_id, action="flag")
    if error is not None:
        raise _reject(post, error)

    flags = list(post.fishy_flags)
    if viewer_id in flags:
        flags.remove(viewer_id)
        flagged = False
    else:
        flags.append(viewer_id)
        flagged = True

    logger.debug(f"Flag on post {post.id} by {viewer_id}: flagged={flagged}")
    return FlagOutcome(
        fishy_flags=flags, flagged=flagged, updates={"fishyFlags": list(flags)}
    )


def clear_flags(post: ContestPost) -> Dict[str, Any]:
    """Admin moderation: payload removing every flag from ``post``."""
    logger.info(f"Clearing {len(post.fishy_flags)} flag(s) from post {post.id}")
    return {"fishyFlags": []}


def toggle_upvote(post: ContestPost, viewer_id: str | None) -> ReactionOutcome:
    """Deprecated: use toggle_reaction(post, viewer_id, THUMBS_UP)."""
    warnings.warn(
        "toggle_upvote is deprecated; use toggle_reaction with THUMBS_UP",
        DeprecationWarning,
        stacklevel=2,
    )
    return toggle_reaction(post, viewer_id, THUMBS_UP)


def summarize(
    view: NormalizedReactions, viewer_id: str | None = None, max_visible: int = 3
) -> ReactionSummary:
    """Collapse a reaction view to the top ``max_visible`` emoji with counts."""
    entries = view.entries()
    visible = tuple((emoji, len(ids)) for emoji, ids in entries[:max_visible])
    return ReactionSummary(
        visible=visible,
        hidden=max(len(entries) - max_visible, 0),
        total=sum(len(ids) for _, ids in entries),
        user_reaction=view.find_user_reaction(viewer_id),
    )


def reaction_title(emoji: str) -> str:
    return REACTION_EMOJIS.get(emoji, emoji)


def reaction_tooltip(emoji: str, user_ids: tuple[str, ...] | list[str], viewer_id: str | None) -> str:
    """Who reacted with ``emoji``, phrased from the viewer's point of view."""
    count = len(user_ids)
    has_viewer = bool(viewer_id) and viewer_id in user_ids

    if count == 1 and has_viewer:
        return f"You reacted with {emoji}"
    if count == 1:
        return f"1 person reacted with {emoji}"
    if has_viewer:
        others = count - 1
        return f"You and {others} other{'s' if others > 1 else ''} reacted with {emoji}"
    return f"{count} people reacted with {emoji}"
