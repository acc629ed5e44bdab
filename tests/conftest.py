"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Make the package importable without installing it
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from clubthreads.models.schemas import Post  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture
def make_post():
    """Factory for Post records with sensible defaults."""

    def _make(post_id, parent_id=None, **kwargs):
        kwargs.setdefault("content", f"post {post_id}")
        kwargs.setdefault("author_id", "user-1")
        return Post(id=post_id, parent_id=parent_id, **kwargs)

    return _make
