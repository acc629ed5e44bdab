"""Repository protocols (ports) for discussion post storage.

Concrete adapters (e.g., the file-based PostRepository, or a client for the
hosted database) satisfy them via structural subtyping.
"""

from __future__ import annotations

from typing import Protocol

from clubthreads.models.schemas import Post


class PostRepositoryProtocol(Protocol):
    """Port for reading and writing a topic's flat post collection."""

    def get_discussion_posts(self, topic_id: str) -> list[Post]:  # noqa: D401
        """Return every post of the topic, oldest first."""

    def save_discussion_posts(
        self, topic_id: str, posts: list[Post]
    ) -> str:  # noqa: D401
        """Persist the topic's posts and return the written location."""
