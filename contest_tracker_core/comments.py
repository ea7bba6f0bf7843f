"""Comment rules: text limits, authorship, deletion rights, display paging."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List

from .errors import CommentError
from .validation import COMMENT_MAX_LENGTH, Comment, InputSanitizer, as_utc

logger = logging.getLogger(__name__)

# Comments shown before "view more"
COMMENT_PREVIEW_COUNT = 3


@dataclass(frozen=True)
class CommentPage:
    visible: tuple[Comment, ...]
    total: int
    has_more: bool
    hidden_count: int


def validate_comment_text(text: str, max_length: int = COMMENT_MAX_LENGTH) -> str:
    """Return the trimmed comment text.

    The length limit applies to the text as typed, before trimming.

    Raises:
        CommentError: blank text, or longer than ``max_length``
    """
    if not isinstance(text, str) or not text.strip():
        raise CommentError("Comment cannot be empty")
    if len(text) > max_length:
        raise CommentError(f"Comment exceeds {max_length} character limit")
    return text.strip()


def build_comment(
    post_id: str,
    text: str,
    author_id: str | None,
    author_name: str,
    *,
    now: datetime | None = None,
    anonymous: bool = False,
    max_length: int = COMMENT_MAX_LENGTH,
) -> Comment:
    """Create a new comment by a signed-in, non-anonymous author.

    Raises:
        CommentError: author not signed in or anonymous, or invalid text
    """
    if not author_id or anonymous:
        logger.warning(f"Rejected comment on post {post_id}: author not signed in")
        raise CommentError("You must be signed in to comment")

    clean_text = validate_comment_text(text, max_length=max_length)
    timestamp = as_utc(now) if now is not None else datetime.now(timezone.utc)

    return Comment(
        id=str(uuid.uuid4()),
        post_id=post_id,
        user_id=author_id,
        user_name=InputSanitizer.sanitize_display_name(author_name),
        text=clean_text,
        timestamp=timestamp,
    )


def can_delete_comment(comment: Comment, viewer_id: str | None, is_admin: bool = False) -> bool:
    if not viewer_id:
        return False
    return is_admin or comment.user_id == viewer_id


def order_comments(comments: Iterable[Comment]) -> List[Comment]:
    """Newest first."""
    return sorted(comments, key=lambda c: c.timestamp, reverse=True)


def comment_page(
    comments: Iterable[Comment],
    expanded: bool = False,
    preview: int = COMMENT_PREVIEW_COUNT,
) -> CommentPage:
    """Newest-first slice for display, collapsed to ``preview`` entries."""
    ordered = order_comments(comments)
    total = len(ordered)
    visible = ordered if expanded else ordered[:preview]
    return CommentPage(
        visible=tuple(visible),
        total=total,
        has_more=total > preview,
        hidden_count=total - len(visible),
    )
