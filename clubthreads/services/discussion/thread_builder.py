"""Reply-tree builder for a topic's flat post collection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Optional

from clubthreads.models.schemas import Post, ThreadedPost, ThreadSummary

logger = logging.getLogger(__name__)

ORPHAN_POLICIES = ("drop", "promote")


def find_orphans(posts: Iterable[Post]) -> list[Post]:
    """Return posts whose parent is not part of the collection, in input order."""
    posts = list(posts)
    known_ids = {p.id for p in posts}
    return [
        p for p in posts if p.parent_id is not None and p.parent_id not in known_ids
    ]


def _to_threaded(post: Post, depth: int) -> ThreadedPost:
    fields = post.model_dump(exclude={"replies", "depth"})
    return ThreadedPost(**fields, replies=[], depth=depth)


def build_threaded_posts(
    posts: Iterable[Post],
    parent_id: Optional[str] = None,
    depth: int = 0,
    *,
    orphan_policy: str = "drop",
) -> list[ThreadedPost]:
    """Build the reply forest under ``parent_id`` from flat posts.

    Args:
        posts: All posts of one topic, in any order
        parent_id: Parent to collect children of; None selects top-level posts
        depth: Depth assigned to the returned level
        orphan_policy: "drop" hides posts whose parent is missing from the
            collection; "promote" shows them as extra roots (top-level call only)

    Returns:
        Threaded posts whose ``parent_id`` equals ``parent_id``, each with its
        replies attached. Siblings keep their input order. Deleted posts are
        kept so their replies stay reachable.

    Raises:
        ValueError: If orphan_policy is unknown
    """
    if orphan_policy not in ORPHAN_POLICIES:
        raise ValueError(
            f"Unknown orphan_policy {orphan_policy!r}, expected one of {ORPHAN_POLICIES}"
        )

    posts = list(posts)
    if not posts:
        return []

    # Indices rather than ids so duplicate ids in bad data are still visited once each
    children: dict[Optional[str], list[int]] = {}
    for index, post in enumerate(posts):
        children.setdefault(post.parent_id, []).append(index)

    top_level = children.get(parent_id, [])
    if orphan_policy == "promote" and parent_id is None:
        orphan_ids = {id(p) for p in find_orphans(posts)}
        top_level = [
            i
            for i, p in enumerate(posts)
            if p.parent_id is None or id(p) in orphan_ids
        ]

    forest: list[ThreadedPost] = []
    placed: set[int] = set()
    stack: list[tuple[int, int, list[ThreadedPost]]] = [
        (i, depth, forest) for i in reversed(top_level)
    ]
    while stack:
        index, level, siblings = stack.pop()
        # A parent_id cycle would otherwise revisit the same post forever. With
        # duplicate ids the replies land under the first duplicate only.
        if index in placed:
            continue
        placed.add(index)

        node = _to_threaded(posts[index], level)
        siblings.append(node)
        for child in reversed(children.get(node.id, [])):
            stack.append((child, level + 1, node.replies))

    logger.debug(
        "Built threaded posts",
        extra={
            "root_count": len(forest),
            "post_count": len(posts),
            "placed_count": len(placed),
            "unreachable_count": len(posts) - len(placed) if parent_id is None else None,
            "orphan_policy": orphan_policy,
        },
    )
    return forest


def iter_threaded_posts(forest: Iterable[ThreadedPost]) -> Iterator[ThreadedPost]:
    """Walk a forest depth-first, parents before their replies."""
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.replies))


def summarize_threads(
    forest: list[ThreadedPost], posts: Optional[Iterable[Post]] = None
) -> ThreadSummary:
    """Count roots, posts, deleted posts and deepest level of a forest.

    When the source ``posts`` are given, orphan ids are included too.
    """
    post_count = 0
    deleted_count = 0
    max_depth = 0
    for node in iter_threaded_posts(forest):
        post_count += 1
        if node.is_removed:
            deleted_count += 1
        max_depth = max(max_depth, node.depth)

    orphan_ids = [p.id for p in find_orphans(posts)] if posts is not None else []
    return ThreadSummary(
        root_count=len(forest),
        post_count=post_count,
        max_depth=max_depth,
        deleted_count=deleted_count,
        orphan_ids=orphan_ids,
    )
