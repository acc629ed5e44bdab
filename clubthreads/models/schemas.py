"""Pydantic models for discussion posts and threaded reply trees.

Posts arrive as flat storage records (one row per comment). The builder in
``clubthreads.services.discussion.thread_builder`` turns them into nested
``ThreadedPost`` trees.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Post(BaseModel):
    """Single discussion post (comment) as stored for a topic.

    Storage column names (``parent_post_id``, ``user_id``) are accepted as
    aliases so rows can be validated without renaming.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "6f1c0d9e-post",
                "parent_id": None,
                "topic_id": "b7e2-topic",
                "content": "Chapter three changed everything for me.",
                "author_id": "user-42",
                "created_at": "2025-03-02T18:21:00+00:00",
                "is_deleted": False,
                "deleted_by_moderator": False,
            }
        },
    )

    id: str = Field(..., min_length=1, description="Post identifier")
    parent_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("parent_id", "parent_post_id"),
        description="ID of the post this one replies to (None for top level)",
    )
    topic_id: Optional[str] = Field(default=None, description="Owning topic ID")
    content: str = Field(default="", description="Post text body")
    author_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("author_id", "user_id"),
        description="Authoring user ID",
    )
    created_at: Optional[datetime] = Field(default=None, description="Creation time")
    updated_at: Optional[datetime] = Field(default=None, description="Last edit time")

    is_deleted: bool = Field(default=False, description="Soft-deleted by author")
    deleted_by_moderator: bool = Field(
        default=False, description="Soft-deleted by a club moderator"
    )
    deleted_at: Optional[datetime] = Field(default=None, description="Deletion time")
    deleted_by: Optional[str] = Field(
        default=None, description="User who deleted the post"
    )

    @field_validator("is_deleted", "deleted_by_moderator", mode="before")
    @classmethod
    def null_flag_is_false(cls, v: Any) -> Any:
        """Nullable boolean columns read as False."""
        return False if v is None else v

    @field_validator("parent_id", mode="before")
    @classmethod
    def empty_parent_is_none(cls, v: Any) -> Any:
        """Treat an empty parent reference as a top-level post."""
        return None if v == "" else v

    @property
    def is_removed(self) -> bool:
        """True if the post was soft-deleted by its author or a moderator."""
        return self.is_deleted or self.deleted_by_moderator


class ThreadedPost(Post):
    """Post with its nested replies and depth within the reply tree.

    Built fresh on every call to ``build_threaded_posts``; treat as a
    read-only snapshot.
    """

    replies: list["ThreadedPost"] = Field(
        default_factory=list, description="Direct replies in input order"
    )
    depth: int = Field(default=0, ge=0, description="Nesting level (root = 0)")

    @property
    def reply_count(self) -> int:
        """Number of direct replies."""
        return len(self.replies)


class ThreadSummary(BaseModel):
    """Counts describing a built forest of threaded posts."""

    model_config = ConfigDict(frozen=True)

    root_count: int = Field(0, ge=0, description="Top-level posts in the forest")
    post_count: int = Field(0, ge=0, description="Posts reachable in the forest")
    max_depth: int = Field(0, ge=0, description="Deepest nesting level present")
    deleted_count: int = Field(
        0, ge=0, description="Soft-deleted posts kept in the forest"
    )
    orphan_ids: list[str] = Field(
        default_factory=list,
        description="Posts whose parent is not in the collection",
    )
