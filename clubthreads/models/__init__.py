"""Data models package.

Exports the Pydantic models for posts, threaded trees and summaries.
"""

from clubthreads.models.schemas import Post, ThreadedPost, ThreadSummary

__all__ = [
    "Post",
    "ThreadedPost",
    "ThreadSummary",
]
