"""Post repository for file-based storage using Pydantic models.

File structure: {data_dir}/topics/{topic_id}.json holding a JSON list of post
records. Storage column names (parent_post_id, user_id) are accepted.
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from clubthreads.core.exceptions import PostDataError, TopicNotFoundError
from clubthreads.models.schemas import Post

logger = logging.getLogger(__name__)

_POST_LIST = TypeAdapter(list[Post])


def _created_sort_key(post: Post) -> float:
    # Missing timestamps sort first; naive datetimes are read as local time
    return post.created_at.timestamp() if post.created_at else float("-inf")


class PostRepository:
    """Repository storing one JSON file of posts per discussion topic."""

    def __init__(self, data_dir: Path):
        """Initialize repository with data directory.

        Args:
            data_dir: Root directory; topic files live under ``topics/``
        """
        self.data_dir = Path(data_dir)
        self.topics_dir = self.data_dir / "topics"
        self.topics_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"PostRepository initialized with data_dir={self.data_dir}")

    def get_topic_path(self, topic_id: str) -> Path:
        """Return the JSON file path for a topic (may not exist yet)."""
        safe_id = topic_id.replace("/", "_").replace("\\", "_")
        return self.topics_dir / f"{safe_id}.json"

    def get_discussion_posts(self, topic_id: str) -> list[Post]:
        """Load a topic's posts ordered by created_at ascending.

        Raises:
            TopicNotFoundError: If no file exists for the topic
            PostDataError: If the file is not valid JSON or a record is invalid
        """
        file_path = self.get_topic_path(topic_id)
        if not file_path.exists():
            raise TopicNotFoundError(f"Topic {topic_id} not found", topic_id)

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PostDataError(f"Invalid JSON in {file_path}: {e}") from e

        try:
            posts = _POST_LIST.validate_python(data)
        except ValidationError as e:
            raise PostDataError(
                f"Invalid post records in {file_path}",
                validation_errors=e.errors(include_url=False),
            ) from e

        for post in posts:
            if post.topic_id is not None and post.topic_id != topic_id:
                logger.warning(
                    "Post belongs to a different topic",
                    extra={"topic_id": topic_id, "post_id": post.id},
                )

        # sorted() is stable: equal timestamps keep file order
        posts = sorted(posts, key=_created_sort_key)
        logger.debug(
            f"Loaded {len(posts)} posts from {file_path}",
            extra={"topic_id": topic_id, "post_count": len(posts)},
        )
        return posts

    def save_discussion_posts(self, topic_id: str, posts: list[Post]) -> str:
        """Save a topic's posts to JSON atomically and return the file path."""
        file_path = self.get_topic_path(topic_id)
        data = [p.model_dump(mode="json") for p in posts]

        # Atomic write: write to temp file, then rename
        temp_path = file_path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            temp_path.replace(file_path)
        except Exception as e:
            logger.error(
                f"Failed to save posts to {file_path}: {e}",
                extra={"topic_id": topic_id},
            )
            if temp_path.exists():
                temp_path.unlink()
            raise

        logger.info(
            f"Saved {len(posts)} posts to {file_path}",
            extra={"topic_id": topic_id, "post_count": len(posts)},
        )
        return str(file_path)
