"""Batch migration of legacy ``upvotes`` into ``reactions['👍']``.

The reaction read view already folds upvotes in on the fly; this module is
the explicit, idempotent conversion that persists the merge and empties the
legacy field so that shim can eventually be retired.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Protocol, Tuple

from .reactions import THUMBS_UP
from .types import PostDoc, UpdatePayload
from .validation import ContestPost, SchemaError

logger = logging.getLogger(__name__)

# Firestore rejects batches above this many writes
MAX_BATCH_SIZE = 500

PostUpdate = Tuple[str, UpdatePayload]


class PostStore(Protocol):
    def iter_posts(self) -> Iterable[PostDoc]:
        ...

    def commit(self, batch: List[PostUpdate]) -> None:
        ...


@dataclass
class MigrationReport:
    migrated: int = 0
    skipped: int = 0
    errors: int = 0


def post_needs_migration(post: ContestPost) -> bool:
    """True when the post has legacy upvotes and no 👍 entry yet."""
    return bool(post.upvotes) and THUMBS_UP not in post.reactions


def migrate_post_reactions(post: ContestPost) -> UpdatePayload:
    """Update payload moving upvotes into 👍; empty when nothing to do.

    Other reaction keys are carried over unchanged.
    """
    if not post_needs_migration(post):
        return {}
    reactions = {emoji: list(user_ids) for emoji, user_ids in post.reactions.items()}
    reactions[THUMBS_UP] = list(post.upvotes or ())
    return {"reactions": reactions, "upvotes": []}


def migrate_legacy_posts(store: PostStore, batch_size: int = MAX_BATCH_SIZE) -> MigrationReport:
    """Convert every legacy post in ``store``.

    Args:
        store: Source of raw post documents and sink for update batches
        batch_size: Writes per commit (capped at MAX_BATCH_SIZE)

    Returns:
        MigrationReport with per-document counts. A document that fails to
        parse counts as an error and does not stop the run; a failing commit
        propagates.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    batch_size = min(batch_size, MAX_BATCH_SIZE)

    report = MigrationReport()
    batch: List[PostUpdate] = []

    for doc in store.iter_posts():
        try:
            post = ContestPost.model_validate(doc)
        except SchemaError as e:
            doc_id = doc.get("id") if isinstance(doc, Mapping) else None
            logger.error(f"Error migrating post {doc_id}: {e.error_count()} validation error(s)")
            report.errors += 1
            continue

        updates = migrate_post_reactions(post)
        if not updates:
            report.skipped += 1
            continue

        batch.append((post.id, updates))
        report.migrated += 1
        if len(batch) >= batch_size:
            store.commit(batch)
            batch = []

    if batch:
        store.commit(batch)

    logger.info(
        f"Migration completed: {report.migrated} migrated, "
        f"{report.skipped} skipped, {report.errors} errors"
    )
    return report
