"""Pytest configuration for unit tests."""

import pytest

from clubthreads.services.collapse.session_store import InMemorySessionStore


@pytest.fixture
def memory_store():
    return InMemorySessionStore()
