"""Turning a log-form draft into a contest post, and editing or removing it."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from .errors import PostPermissionError
from .phase import ensure_can_post
from .types import UpdatePayload
from .validation import Contest, ContestPost, PostDraft, as_utc

logger = logging.getLogger(__name__)


@dataclass
class PostEdit:
    """Update payload for an edited post plus the change to its owner's total."""

    updates: UpdatePayload
    count_delta: int


def prepare_post(
    contest: Contest,
    draft: PostDraft,
    user_id: str,
    user_name: str,
    now: datetime | None = None,
) -> ContestPost:
    """Build a new entry post for ``contest``.

    Raises:
        PostingClosedError: the contest is not in its active phase
        pydantic.ValidationError: missing user id
    """
    timestamp = as_utc(now) if now is not None else datetime.now(timezone.utc)
    ensure_can_post(contest, timestamp)

    post = ContestPost(
        id=str(uuid.uuid4()),
        contest_id=contest.id,
        user_id=user_id,
        user_name=user_name,
        count=draft.count,
        timestamp=timestamp,
        description=draft.description,
        image=draft.image,
        type="entry",
    )
    logger.debug(f"Prepared post {post.id} for contest {contest.id}: count={post.count}")
    return post


def _may_change(post: ContestPost, viewer_id: str | None, is_admin: bool) -> bool:
    if not viewer_id:
        return False
    return is_admin or post.user_id == viewer_id


def can_edit_post(post: ContestPost, viewer_id: str | None, is_admin: bool = False) -> bool:
    return _may_change(post, viewer_id, is_admin)


def can_delete_post(post: ContestPost, viewer_id: str | None, is_admin: bool = False) -> bool:
    return _may_change(post, viewer_id, is_admin)


def prepare_post_edit(
    post: ContestPost,
    editor_id: str | None,
    draft: PostDraft | Mapping[str, Any],
    is_admin: bool = False,
) -> PostEdit:
    """Validate an edit of ``post``'s count and description.

    The draft is validated again, so a draft built without validation
    still has to respect the count limits.

    Returns:
        PostEdit with the ``count``/``description`` update and the amount to
        add to the owner's total (entry posts only; others carry no count)

    Raises:
        PostPermissionError: editor is neither the owner nor an admin
        pydantic.ValidationError: count outside the allowed range
    """
    if not can_edit_post(post, editor_id, is_admin):
        logger.warning(f"Rejected edit of post {post.id} by {editor_id}")
        raise PostPermissionError("Only the author or an admin can edit this post")

    raw = draft.model_dump() if isinstance(draft, PostDraft) else dict(draft)
    checked = PostDraft.model_validate(raw)

    count_delta = checked.count - post.count if post.type == "entry" else 0
    logger.debug(f"Prepared edit of post {post.id}: count {post.count} → {checked.count}")
    return PostEdit(
        updates={"count": checked.count, "description": checked.description},
        count_delta=count_delta,
    )
