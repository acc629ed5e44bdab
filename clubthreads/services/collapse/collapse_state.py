"""Per-topic collapse state kept in a session key/value store.

A collapsed post is recorded as the key ``{prefix}-{topic_id}-{post_id}``.
The builder never reads this state; the view combines it with a built
forest via ``presentation.visible_posts``.
"""

from __future__ import annotations

import logging
from typing import Optional

from clubthreads.observability.metrics_adapter import MetricsAdapter, NoopMetricsAdapter
from clubthreads.services.collapse.session_store import SessionStoreProtocol

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY_PREFIX = "discussion"
_COLLAPSED = "1"


def topic_key_prefix(
    topic_id: str, session_key_prefix: str = DEFAULT_SESSION_KEY_PREFIX
) -> str:
    return f"{session_key_prefix}-{topic_id}"


def collapse_key(
    topic_id: str,
    post_id: str,
    session_key_prefix: str = DEFAULT_SESSION_KEY_PREFIX,
) -> str:
    return f"{topic_key_prefix(topic_id, session_key_prefix)}-{post_id}"


def reset_topic_collapse_state(
    store: Optional[SessionStoreProtocol],
    topic_id: str,
    session_key_prefix: str = DEFAULT_SESSION_KEY_PREFIX,
    *,
    metrics: Optional[MetricsAdapter] = None,
) -> None:
    """Remove every session key starting with ``{session_key_prefix}-{topic_id}``.

    Advisory cleanup: without a session store (headless/server context) this
    does nothing, and any store failure is logged and swallowed.
    """
    if store is None:
        logger.debug(
            "No session store; skipping collapse reset", extra={"topic_id": topic_id}
        )
        return

    metrics = metrics or NoopMetricsAdapter()
    # Literal prefix: topic "1" also clears topic "12". collapsed_ids() reads
    # with a trailing separator, so only the reset is this broad.
    prefix = topic_key_prefix(topic_id, session_key_prefix)
    try:
        keys = store.keys_with_prefix(prefix)
        removed = store.delete(*keys) if keys else 0
    except Exception as e:
        logger.warning(
            f"Failed to reset collapse state for topic {topic_id}: {e}",
            extra={"topic_id": topic_id, "prefix": prefix},
            exc_info=True,
        )
        metrics.inc_collapse_reset_failed(type(e).__name__)
        return

    metrics.inc_collapse_reset()
    logger.info(
        "Collapse state reset",
        extra={"topic_id": topic_id, "prefix": prefix, "removed": removed},
    )


class CollapseState:
    """Collapse bookkeeping for one topic in one viewer session."""

    def __init__(
        self,
        store: SessionStoreProtocol,
        topic_id: str,
        *,
        session_key_prefix: str = DEFAULT_SESSION_KEY_PREFIX,
        metrics: Optional[MetricsAdapter] = None,
    ) -> None:
        self._store = store
        self._topic_id = topic_id
        self._prefix = session_key_prefix
        self._metrics = metrics

    @property
    def topic_id(self) -> str:
        return self._topic_id

    def key_for(self, post_id: str) -> str:
        return collapse_key(self._topic_id, post_id, self._prefix)

    def is_collapsed(self, post_id: str) -> bool:
        return self._store.get(self.key_for(post_id)) == _COLLAPSED

    def set_collapsed(self, post_id: str, collapsed: bool) -> None:
        if collapsed:
            self._store.set(self.key_for(post_id), _COLLAPSED)
        else:
            self._store.delete(self.key_for(post_id))

    def toggle(self, post_id: str) -> bool:
        """Flip a post's collapse flag and return the new state."""
        collapsed = not self.is_collapsed(post_id)
        self.set_collapsed(post_id, collapsed)
        return collapsed

    def collapsed_ids(self) -> set[str]:
        """Post ids currently collapsed in this topic."""
        # Trailing separator so topic "1" does not pick up topic "12"
        prefix = topic_key_prefix(self._topic_id, self._prefix) + "-"
        return {key[len(prefix) :] for key in self._store.keys_with_prefix(prefix)}

    def reset(self) -> None:
        reset_topic_collapse_state(
            self._store, self._topic_id, self._prefix, metrics=self._metrics
        )
