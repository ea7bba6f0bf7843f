"""Type definitions for raw documents read from the document store."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, TypedDict


class ContestDoc(TypedDict, total=False):
    """A contest record as stored (all fields optional until validated)."""
    id: str
    name: str
    startDate: datetime | str
    endDate: datetime | str
    # Missing on contests without a review period
    endOfReviewDate: Optional[datetime | str]


class PostDoc(TypedDict, total=False):
    """
    TypedDict representing a contest post document.

    Older posts carry ``upvotes`` instead of a ``reactions`` map; both may be
    present while the legacy migration is in progress.
    """
    id: str
    contestId: str
    userId: str
    userName: str
    count: int
    timestamp: datetime | str
    description: Optional[str]
    image: Optional[str]
    type: str  # 'entry' | 'join' | 'invite'
    invitedUsers: List[str]

    # Emoji -> userIds who picked it
    reactions: Dict[str, List[str]]
    # userIds who flagged the post as suspicious
    fishyFlags: List[str]
    # Legacy approval list, superseded by reactions['👍']
    upvotes: List[str]


class CommentDoc(TypedDict, total=False):
    """A comment stored under a post."""
    id: str
    postId: str
    userId: str
    userName: str
    text: str
    timestamp: datetime | str


class UserDoc(TypedDict, total=False):
    id: str
    displayName: str
    email: Optional[str]
    totalCount: int
    isAdmin: bool


# Update payloads handed back to the caller for persistence
UpdatePayload = Dict[str, Any]
