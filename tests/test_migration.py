from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

from contest_tracker_core import (
    THUMBS_UP,
    ContestPost,
    migrate_legacy_posts,
    migrate_post_reactions,
    normalize,
    post_needs_migration,
)

TS = datetime(2024, 7, 4, 12, 30, tzinfo=timezone.utc)


def _doc(post_id: str, **extra) -> dict:
    doc = {"id": post_id, "userId": "owner", "count": 1, "timestamp": TS}
    doc.update(extra)
    return doc


@dataclass
class _MemoryStore:
    docs: list[dict]
    commits: list[list] = field(default_factory=list)

    def iter_posts(self):
        return iter(self.docs)

    def commit(self, batch):
        self.commits.append(list(batch))
        by_id = {d.get("id"): d for d in self.docs}
        for post_id, updates in batch:
            by_id[post_id].update(updates)


def test_needs_migration_only_for_upvotes_without_thumbs_up():
    assert post_needs_migration(ContestPost.model_validate(_doc("a", upvotes=["u1"])))
    assert not post_needs_migration(ContestPost.model_validate(_doc("b", upvotes=[])))
    assert not post_needs_migration(
        ContestPost.model_validate(_doc("c", upvotes=["u1"], reactions={THUMBS_UP: ["u2"]}))
    )
    assert not post_needs_migration(ContestPost.model_validate(_doc("d")))


def test_migrate_post_keeps_other_reactions():
    post = ContestPost.model_validate(_doc("a", upvotes=["u1", "u2"], reactions={"🔥": ["u3"]}))
    updates = migrate_post_reactions(post)
    assert updates == {"reactions": {"🔥": ["u3"], THUMBS_UP: ["u1", "u2"]}, "upvotes": []}


def test_migrated_post_reads_the_same_as_the_shim():
    post = ContestPost.model_validate(_doc("a", upvotes=["u1", "u2"]))
    before = dict(normalize(post).reactions)
    migrated = ContestPost.model_validate({**post.to_doc(), **migrate_post_reactions(post)})
    assert dict(normalize(migrated).reactions) == before
    assert migrate_post_reactions(migrated) == {}


def test_batch_migration_counts_and_is_idempotent():
    store = _MemoryStore(
        docs=[
            _doc("a", upvotes=["u1"]),
            _doc("b"),
            _doc("c", upvotes=["u2"], reactions={"🎉": ["u3"]}),
            {"id": "broken", "count": -4},
        ]
    )
    report = migrate_legacy_posts(store)
    assert (report.migrated, report.skipped, report.errors) == (2, 1, 1)
    assert len(store.commits) == 1
    assert store.docs[0]["reactions"] == {THUMBS_UP: ["u1"]}
    assert store.docs[0]["upvotes"] == []

    again = migrate_legacy_posts(store)
    assert (again.migrated, again.skipped, again.errors) == (0, 3, 1)
    assert len(store.commits) == 1


def test_batch_migration_splits_commits():
    store = _MemoryStore(docs=[_doc(f"p{i}", upvotes=["u"]) for i in range(5)])
    report = migrate_legacy_posts(store, batch_size=2)
    assert report.migrated == 5
    assert [len(batch) for batch in store.commits] == [2, 2, 1]


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        migrate_legacy_posts(_MemoryStore(docs=[]), batch_size=0)
