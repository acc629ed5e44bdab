"""Use case: load a topic's posts and build its threaded view.

Mirrors the discussion page flow: fetch the flat posts (oldest first), build
the reply forest, and combine it with the viewer's collapse state. The
"reset view" action clears collapse state and loads again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from clubthreads.models.schemas import Post, ThreadedPost, ThreadSummary
from clubthreads.observability.metrics_adapter import MetricsAdapter, NoopMetricsAdapter
from clubthreads.repositories.protocols import PostRepositoryProtocol
from clubthreads.services.collapse.collapse_state import (
    DEFAULT_SESSION_KEY_PREFIX,
    CollapseState,
    reset_topic_collapse_state,
)
from clubthreads.services.collapse.session_store import SessionStoreProtocol
from clubthreads.services.discussion.thread_builder import (
    build_threaded_posts,
    summarize_threads,
)
from clubthreads.utils.correlation import CorrelationContext

logger = logging.getLogger(__name__)


@dataclass
class TopicThreads:
    """Built view of one topic."""

    topic_id: str
    posts: list[Post]
    forest: list[ThreadedPost]
    summary: ThreadSummary
    collapsed_ids: set[str] = field(default_factory=set)


class TopicThreadsUseCase:
    """Load a topic's threaded posts and manage its collapse state."""

    def __init__(
        self,
        *,
        repository: PostRepositoryProtocol,
        collapse_store: Optional[SessionStoreProtocol] = None,
        metrics: Optional[MetricsAdapter] = None,
        orphan_policy: str = "drop",
        session_key_prefix: str = DEFAULT_SESSION_KEY_PREFIX,
    ) -> None:
        """Initialize use case.

        Args:
            repository: Source of a topic's flat posts
            collapse_store: Viewer session store; None in headless contexts
            metrics: Metrics adapter (no-op if omitted)
            orphan_policy: "drop" or "promote", passed to the builder
            session_key_prefix: Prefix of collapse-state keys
        """
        self._repository = repository
        self._store = collapse_store
        self._metrics = metrics or NoopMetricsAdapter()
        self._orphan_policy = orphan_policy
        self._prefix = session_key_prefix

    def collapse_state(self, topic_id: str) -> Optional[CollapseState]:
        """Collapse state for a topic, or None without a session store."""
        if self._store is None:
            return None
        return CollapseState(
            self._store,
            topic_id,
            session_key_prefix=self._prefix,
            metrics=self._metrics,
        )

    def load(self, topic_id: str) -> TopicThreads:
        """Fetch posts and build the topic's forest.

        Raises:
            TopicNotFoundError: If the repository has no such topic
            PostDataError: If stored records are invalid
        """
        with CorrelationContext():
            posts = self._repository.get_discussion_posts(topic_id)

            started = time.perf_counter()
            forest = build_threaded_posts(posts, orphan_policy=self._orphan_policy)
            duration = time.perf_counter() - started

            summary = summarize_threads(forest, posts)
            dropped = len(posts) - summary.post_count
            self._metrics.observe_build(
                orphan_policy=self._orphan_policy,
                duration_seconds=duration,
                post_count=summary.post_count,
                dropped_count=dropped,
            )

            if dropped:
                logger.warning(
                    f"{dropped} posts not reachable from any root in topic {topic_id}",
                    extra={
                        "topic_id": topic_id,
                        "orphan_ids": summary.orphan_ids,
                        "orphan_policy": self._orphan_policy,
                    },
                )

            collapsed_ids = self._read_collapsed_ids(topic_id)
            logger.info(
                "Topic threads built",
                extra={
                    "topic_id": topic_id,
                    "root_count": summary.root_count,
                    "post_count": summary.post_count,
                    "max_depth": summary.max_depth,
                    "collapsed_count": len(collapsed_ids),
                    "duration_seconds": round(duration, 6),
                },
            )
            return TopicThreads(
                topic_id=topic_id,
                posts=posts,
                forest=forest,
                summary=summary,
                collapsed_ids=collapsed_ids,
            )

    def reset_view(self, topic_id: str) -> TopicThreads:
        """Clear the topic's collapse state and load it again."""
        with CorrelationContext():
            reset_topic_collapse_state(
                self._store, topic_id, self._prefix, metrics=self._metrics
            )
            return self.load(topic_id)

    def _read_collapsed_ids(self, topic_id: str) -> set[str]:
        state = self.collapse_state(topic_id)
        if state is None:
            return set()
        try:
            return state.collapsed_ids()
        except Exception as e:
            # Collapse state is cosmetic; show everything expanded instead
            logger.warning(
                f"Failed to read collapse state for topic {topic_id}: {e}",
                extra={"topic_id": topic_id},
            )
            return set()
